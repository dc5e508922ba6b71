"""Exception types shared by adapters, pipelines and routes."""


class BrandServiceError(Exception):
    """Base class for errors raised inside the brand analysis backend."""


class UpstreamUnavailable(BrandServiceError):
    """An external source (registrar, search, page, LLM) failed or timed out."""


class InputInvalid(BrandServiceError):
    """Caller supplied a missing or empty brand name / competitor list."""


class PipelineExhausted(BrandServiceError):
    """Every competitor fetch in a deep scan failed."""


class AnalysisFailed(BrandServiceError):
    """Unexpected failure while orchestrating a brand analysis."""
