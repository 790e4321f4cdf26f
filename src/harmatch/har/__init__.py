"""HAR (HTTP Archive) parsing and reduction.

Example usage:
    from harmatch.har import minimize_all, parse_har_file, reduce_har

    result = parse_har_file("capture.har")
    if result.has_errors:
        print(f"Warning: {len(result.errors)} entries failed to parse")
    candidates = reduce_har(result.log)
    minimized = minimize_all(candidates)
"""

from harmatch.har.minimizer import (
    MAX_POST_DATA_CHARS,
    NOISE_HEADERS,
    MinimalCandidate,
    minimize,
    minimize_all,
)
from harmatch.har.parser import (
    HAREntry,
    HARHeader,
    HARLog,
    HARParseResult,
    HARPostData,
    HARRequest,
    HARResponse,
    ParseError,
    parse_har_data,
    parse_har_file,
    parse_har_string,
    validate_har_schema,
)
from harmatch.har.reducer import (
    HTTP2_PSEUDO_HEADERS,
    CandidateRequest,
    is_html_response,
    reduce_entries,
    reduce_har,
    to_candidate,
)

__all__ = [
    # Parser
    "HAREntry",
    "HARHeader",
    "HARLog",
    "HARParseResult",
    "HARPostData",
    "HARRequest",
    "HARResponse",
    "ParseError",
    "parse_har_data",
    "parse_har_file",
    "parse_har_string",
    "validate_har_schema",
    # Reducer
    "HTTP2_PSEUDO_HEADERS",
    "CandidateRequest",
    "is_html_response",
    "reduce_entries",
    "reduce_har",
    "to_candidate",
    # Minimizer
    "MAX_POST_DATA_CHARS",
    "NOISE_HEADERS",
    "MinimalCandidate",
    "minimize",
    "minimize_all",
]
