import numpy as np
import pytest

from catalog_search.errors import SeedItemFailure
from catalog_search.ingestion import codec
from catalog_search.ingestion.catalog import MENU_ITEMS
from catalog_search.ingestion.models import CatalogEntry, IndexSchema
from catalog_search.ingestion.seeder import CatalogSeeder
from catalog_search.ingestion.vector_store import InMemoryVectorStore
from conftest import INDEX_NAME, VocabularyEmbedder


def make_store(schema: IndexSchema | None = None) -> InMemoryVectorStore:
    store = InMemoryVectorStore()
    store.ensure_index(INDEX_NAME, schema or IndexSchema())
    return store


def test_seed_writes_every_entry(embedder):
    store = make_store()
    written = CatalogSeeder().seed(store, embedder)

    assert written == len(MENU_ITEMS) == 8
    assert store.count_documents(INDEX_NAME) == 8
    hakaw = store._documents["item:Hakaw"]
    assert hakaw["name"] == "Hakaw"
    assert hakaw["price"] == 335
    assert hakaw["description"] == "Crystal shrimp dumplings."
    assert len(hakaw["embedding"]) == 384
    assert np.linalg.norm(codec.decode(hakaw["embedding"])) == pytest.approx(1.0, abs=1e-6)


def test_seed_embeds_name_and_description(embedder):
    CatalogSeeder().seed(make_store(), embedder)
    assert "Hakaw Crystal shrimp dumplings." in embedder.calls
    assert "Pork and Shrimp Siomai Classic dimsum with pork and shrimp filling." in embedder.calls


def test_seed_uses_whitespace_free_keys(embedder):
    store = make_store()
    CatalogSeeder().seed(store, embedder)
    assert "item:PorkandShrimpSiomai" in store._documents
    assert "item:XiaoLongBao" in store._documents


def test_reseeding_overwrites_colliding_keys(embedder):
    store = make_store()
    seeder = CatalogSeeder()
    seeder.seed(store, embedder)
    seeder.seed(store, embedder)
    assert store.count_documents(INDEX_NAME) == 8


def test_reseeding_keeps_stale_entries(embedder):
    store = make_store()
    CatalogSeeder(entries=[CatalogEntry(name="Old Dish", price=1, description="Gone.")]).seed(
        store, embedder
    )
    CatalogSeeder().seed(store, embedder)
    assert store.count_documents(INDEX_NAME) == 9


class FailingEmbedder(VocabularyEmbedder):
    def __init__(self, fail_on: str):
        super().__init__(ready=True)
        self.fail_on = fail_on

    def embed_text(self, text: str) -> np.ndarray:
        if text.startswith(self.fail_on):
            raise RuntimeError("out of memory")
        return super().embed_text(text)


def test_seed_halts_on_first_failure():
    store = make_store()
    with pytest.raises(SeedItemFailure) as excinfo:
        CatalogSeeder().seed(store, FailingEmbedder(fail_on="Special Kikiam"))

    assert excinfo.value.key == "SpecialKikiam"
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    # the two entries before the failing one stay written
    assert store.count_documents(INDEX_NAME) == 2


def test_seed_reports_store_rejections(embedder):
    store = make_store(IndexSchema(dim=16))
    with pytest.raises(SeedItemFailure) as excinfo:
        CatalogSeeder().seed(store, embedder)
    assert excinfo.value.key == "PorkandShrimpSiomai"
    assert store.count_documents(INDEX_NAME) == 0
