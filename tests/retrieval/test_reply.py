from catalog_search.ingestion.models import SearchHit
from catalog_search.retrieval.reply import NO_MATCH_REPLY, format_reply


def test_reply_lists_hits_in_order():
    hits = [
        SearchHit(name="Hakaw", price=335, description="Crystal shrimp dumplings.", score=0.1),
        SearchHit(name="Chicken Feet", price=249.5, description="Braised.", score=0.4),
    ]
    assert format_reply(hits) == (
        "Here's what I found on the menu:\n"
        "- Hakaw (335): Crystal shrimp dumplings.\n"
        "- Chicken Feet (249.50): Braised."
    )


def test_reply_without_hits():
    assert format_reply([]) == NO_MATCH_REPLY
