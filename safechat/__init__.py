"""safechat — a safety-gated streaming chat client.

Every user message passes a prompt-injection check and a category-severity
moderation check before it reaches the language model; replies are streamed
into the transcript as they arrive.
"""

__version__ = "0.1.0"
