from .people_lookup_provider import PeopleLookupClient

__all__ = ["PeopleLookupClient"]
