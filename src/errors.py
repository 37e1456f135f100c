"""Exception hierarchy shared by the research pipeline and ad generation"""


class AdScoutError(Exception):
    """Base class for all application errors"""


class ConfigurationError(AdScoutError):
    """A required credential or setting is missing"""


class ScrapeError(AdScoutError):
    """The brand website could not be scraped"""


class BrandExtractionError(AdScoutError):
    """The language model did not return usable brand information"""


class SearchError(AdScoutError):
    """A search-results API call failed"""


class RateLimitError(SearchError):
    """The search-results API rejected a call for exceeding its rate limit"""


class ResponseParseError(AdScoutError):
    """No JSON object could be parsed out of a model reply"""


class ResearchError(AdScoutError):
    """Fatal research pipeline failure (no partial result is possible)"""
