from pydantic import BaseModel

from catalog_search.ingestion.models import SearchHit

NO_MATCH_REPLY = "Sorry, I couldn't find anything on the menu that matches."


class ChatReply(BaseModel):
    reply: str
    results: list[SearchHit]


def _format_price(price: float) -> str:
    return str(int(price)) if price == int(price) else f"{price:.2f}"


def format_reply(hits: list[SearchHit]) -> str:
    """Human readable answer listing the matches, best first."""
    if not hits:
        return NO_MATCH_REPLY
    lines = ["Here's what I found on the menu:"]
    for hit in hits:
        lines.append(f"- {hit.name} ({_format_price(hit.price)}): {hit.description}")
    return "\n".join(lines)
