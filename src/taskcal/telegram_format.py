"""Telegram message formatting utilities."""

import telegramify_markdown

# Telegram rejects messages over 4096 chars; leave room for escapes
MAX_CHUNK = 4000


def split_chunks(text: str, limit: int = MAX_CHUNK) -> list[str]:
    """Split text into chunks of at most limit chars, preferring line breaks."""
    chunks = []
    current = ""
    for line in text.splitlines(keepends=True):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        if len(current) + len(line) > limit:
            chunks.append(current)
            current = ""
        current += line
    if current:
        chunks.append(current)
    return chunks


async def send_markdown(target, text: str, *, chat_id: int | None = None):
    """Send markdown text to Telegram as MarkdownV2.

    target: a Bot (pass chat_id) or an Update.message (calls reply_text).
    """
    for chunk in split_chunks(telegramify_markdown.markdownify(text)):
        if chat_id is not None:
            await target.send_message(chat_id=chat_id, text=chunk, parse_mode="MarkdownV2")
        else:
            await target.reply_text(chunk, parse_mode="MarkdownV2")
