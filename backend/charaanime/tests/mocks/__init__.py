from charaanime.tests.mocks.providers import FakeCatalogProvider, FakeCharacterProvider

__all__ = ["FakeCatalogProvider", "FakeCharacterProvider"]
