"""Static keyword vocabularies for topic gating and context relevance.

These are data, not logic: classify_question and is_context_relevant take a
vocabulary argument that defaults to the constants below, so tests and other
deployments can inject their own lists. Bump VOCABULARY_VERSION whenever a list
changes so logs can tell which vocabulary made a decision.

All terms are matched as lowercase substrings of the lowercased question, except
greetings and short acronyms which are matched as whole words ("rov" must not
match inside "improve").
"""
from dataclasses import dataclass
from typing import Tuple

VOCABULARY_VERSION = "2024.2"


def _lower(terms: Tuple[str, ...]) -> Tuple[str, ...]:
    return tuple(t.lower() for t in terms)


@dataclass(frozen=True)
class TopicVocabulary:
    """Keyword sets used by the topic gate.

    Attributes:
        greetings: Whole-word greeting patterns.
        ambiguous: Terms only valid when an ocean-context term is also present.
        ocean_context: Terms that establish an ocean context.
        domain: Extended flat list of oceanographic vocabulary.
        acronyms: Short domain terms matched as whole words only.
    """
    greetings: Tuple[str, ...]
    ambiguous: Tuple[str, ...]
    ocean_context: Tuple[str, ...]
    domain: Tuple[str, ...]
    acronyms: Tuple[str, ...] = ()
    version: str = VOCABULARY_VERSION

    def all_terms(self) -> Tuple[str, ...]:
        """Combined vocabulary: context terms, ambiguous terms, then the domain list."""
        return _lower(self.ocean_context + self.ambiguous + self.domain)


@dataclass(frozen=True)
class RelevanceVocabulary:
    """Keyword sets used by the context relevance filter."""
    ocean_terms: Tuple[str, ...]
    coordinate_terms: Tuple[str, ...]
    version: str = VOCABULARY_VERSION


GREETINGS: Tuple[str, ...] = (
    "hi", "hii", "hello", "hey", "good morning", "good evening", "good afternoon",
)

AMBIGUOUS_TERMS: Tuple[str, ...] = (
    "biology", "geology", "chemistry", "physics", "animals", "plants", "environment",
)

OCEAN_CONTEXT_TERMS: Tuple[str, ...] = (
    "ocean", "sea", "marine", "maritime", "aquatic", "coastal", "nautical", "water",
    "deep sea", "hydrothermal", "bay", "gulf",
)

DOMAIN_TERMS: Tuple[str, ...] = (
    # physical properties
    "salinity", "temperature", "tide", "wave", "current", "shore", "beach",
    "trench", "abyss", "oceanography", "bathymetry", "sea level", "strait",
    "pressure", "nitrogen", "nutrients", "sediment", "ph", "nitrate", "phosphate",
    "oxygen", "chlorophyll", "dissolved gas", "carbon dioxide", "co2",
    # life
    "coral", "reef", "fish", "whale", "dolphin", "shark", "plankton",
    "algae", "kelp", "bioluminescence", "phytoplankton", "zooplankton",
    "crustacean", "mollusk", "marine life",
    # vessels and instruments
    "ship", "boat", "submarine", "argo float", "buoy",
    # hazards and human impact
    "tsunami", "seafood", "fishing", "overfishing", "pollution", "plastic", "acidification",
    # basins and features
    "atlantic", "pacific", "indian", "arctic", "antarctic", "mediterranean", "seamount",
    "guyot", "continental shelf", "mid-ocean ridge", "atoll", "lagoon", "estuary",
    "fjord", "delta",
    # circulation and phenomena
    "thermohaline circulation", "upwelling", "downwelling", "gyre", "el niño",
    "la niña", "coriolis effect", "sonar", "hydrography", "acoustics",
    # ecology
    "ecosystem", "food web", "biodiversity", "species", "cetacean", "pinniped",
    "seabird", "mangrove", "seagrass", "echinoderm", "cnidarian",
    # operations
    "aquaculture", "desalination", "offshore", "port", "harbor",
    "dredging", "anoxia", "hypoxia", "dead zone", "eutrophication", "oil spill",
    "microplastics", "carbon cycle", "carbon sink", "ocean tides",
)

ACRONYM_TERMS: Tuple[str, ...] = ("rov", "auv")

RELEVANCE_OCEAN_TERMS: Tuple[str, ...] = (
    "ocean", "sea", "marine", "water", "salinity", "temperature", "depth", "current",
    "tide", "wave", "coastal", "atlantic", "pacific", "indian", "arctic",
)

COORDINATE_TERMS: Tuple[str, ...] = (
    "lat", "latitude", "lon", "longitude", "degree", "coordinate",
)

DEFAULT_TOPIC_VOCABULARY = TopicVocabulary(
    greetings=GREETINGS,
    ambiguous=AMBIGUOUS_TERMS,
    ocean_context=OCEAN_CONTEXT_TERMS,
    domain=DOMAIN_TERMS,
    acronyms=ACRONYM_TERMS,
)

DEFAULT_RELEVANCE_VOCABULARY = RelevanceVocabulary(
    ocean_terms=RELEVANCE_OCEAN_TERMS,
    coordinate_terms=COORDINATE_TERMS,
)
