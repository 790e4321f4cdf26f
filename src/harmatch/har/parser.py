"""HAR document parser.

Validates and decodes HAR (HTTP Archive) documents into structured Python
objects. Only the fields the matching pipeline needs are kept: request method,
URL, header list, query string and post data, plus the response status and
content type.

HAR format specification: http://www.softwareishard.com/blog/har-12-spec/
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from harmatch.exceptions import HARParseError
from harmatch.logging import get_logger

LOG = get_logger(__name__)

DEFAULT_MAX_HAR_BYTES = 100 * 1024 * 1024  # 100 MB


@dataclass(frozen=True)
class HARHeader:
    """Single name/value header pair. Order and duplicates matter, so headers are kept as lists."""

    name: str
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "value": self.value}


@dataclass(frozen=True)
class HARPostData:
    """Request body as captured by the browser."""

    mime_type: str | None = None
    text: str | None = None
    params: list[dict[str, Any]] | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.mime_type is not None:
            out["mimeType"] = self.mime_type
        if self.text is not None:
            out["text"] = self.text
        if self.params is not None:
            out["params"] = [dict(p) for p in self.params]
        return out


@dataclass
class HARRequest:
    """Parsed HTTP request from HAR entry."""

    method: str
    url: str
    headers: list[HARHeader] = field(default_factory=list)
    query_string: list[dict[str, Any]] = field(default_factory=list)
    post_data: HARPostData | None = None


@dataclass
class HARResponse:
    """Parsed HTTP response from HAR entry."""

    status: int
    headers: list[HARHeader] = field(default_factory=list)
    content_mime_type: str | None = None


@dataclass
class HAREntry:
    """Single request/response pair from HAR file."""

    request: HARRequest
    response: HARResponse


@dataclass
class HARLog:
    """Ordered HAR entries plus the optional format version."""

    entries: list[HAREntry]
    version: str | None = None


@dataclass
class ParseError:
    """Error encountered while parsing a single HAR entry.

    Attributes:
        index: Zero-based index of the entry in the HAR file's entries array.
        url: URL of the request that failed to parse, or "unknown" if unavailable.
        error: Human-readable error message describing the parse failure.
    """

    index: int
    url: str
    error: str


@dataclass
class HARParseResult:
    """Result of parsing a HAR document.

    Supports partial success: entries that fail to parse are recorded as
    errors while valid entries are still returned.

    Attributes:
        log: Successfully parsed entries, in original capture order.
        errors: Parse errors for entries that could not be processed.
    """

    log: HARLog
    errors: list[ParseError] = field(default_factory=list)

    @property
    def entries(self) -> list[HAREntry]:
        return self.log.entries

    @property
    def has_errors(self) -> bool:
        """Return True if any parse errors occurred."""
        return bool(self.errors)


def parse_headers(headers_list: Any) -> list[HARHeader]:
    """Convert a HAR headers array to a list of HARHeader.

    Entries without a name are skipped; a missing value becomes "".

    Raises:
        TypeError: If ``headers_list`` is neither None nor a list.
    """
    if headers_list is None:
        return []
    if not isinstance(headers_list, list):
        raise TypeError(f"headers must be an array, got {type(headers_list).__name__}")
    headers: list[HARHeader] = []
    for header in headers_list:
        if not isinstance(header, dict) or not header.get("name"):
            continue
        value = header.get("value")
        headers.append(HARHeader(name=str(header["name"]), value="" if value is None else str(value)))
    return headers


def _object_list(value: Any, field_name: str) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        raise TypeError(f"{field_name} must be an array, got {type(value).__name__}")
    for item in value:
        if not isinstance(item, dict):
            raise TypeError(f"{field_name} items must be objects, got {type(item).__name__}")
    return list(value)


def _optional_str(value: Any, field_name: str) -> str | None:
    if value is not None and not isinstance(value, str):
        raise TypeError(f"{field_name} must be a string, got {type(value).__name__}")
    return value


def parse_post_data(post_data: Any) -> HARPostData | None:
    """Parse a HAR ``postData`` object; strings are taken as the body text.

    Raises:
        TypeError: If ``mimeType`` or ``text`` is not a string, or ``params``
            is not an array of objects.
    """
    if post_data is None:
        return None
    if isinstance(post_data, str):
        return HARPostData(text=post_data)
    if not isinstance(post_data, dict):
        raise TypeError(f"postData must be an object, got {type(post_data).__name__}")
    params = post_data.get("params")
    return HARPostData(
        mime_type=_optional_str(post_data.get("mimeType"), "postData.mimeType"),
        text=_optional_str(post_data.get("text"), "postData.text"),
        params=_object_list(params, "postData.params") if params is not None else None,
    )


def _parse_request(request_data: dict[str, Any]) -> HARRequest:
    url = request_data.get("url")
    if not isinstance(url, str) or not url:
        raise ValueError("request.url must be a non-empty string")
    return HARRequest(
        method=str(request_data.get("method") or "GET"),
        url=url,
        headers=parse_headers(request_data.get("headers")),
        query_string=_object_list(request_data.get("queryString") or [], "queryString"),
        post_data=parse_post_data(request_data.get("postData")),
    )


def _parse_response(response_data: dict[str, Any]) -> HARResponse:
    content = response_data.get("content") or {}
    mime_type = content.get("mimeType") if isinstance(content, dict) else None
    status = response_data.get("status", 0)
    return HARResponse(
        status=int(status) if status is not None else 0,
        headers=parse_headers(response_data.get("headers")),
        content_mime_type=str(mime_type) if mime_type else None,
    )


def validate_har_schema(data: Any) -> None:
    """Validate HAR data has required structure.

    Args:
        data: Parsed JSON data from HAR file.

    Raises:
        HARParseError: If required fields are missing.
    """
    if not isinstance(data, dict):
        raise HARParseError("HAR file must contain a JSON object")

    if "log" not in data:
        raise HARParseError("HAR file must contain 'log' object")

    log = data["log"]
    if not isinstance(log, dict):
        raise HARParseError("'log' must be an object")

    if "entries" not in log:
        raise HARParseError("HAR log must contain 'entries' array")

    if not isinstance(log["entries"], list):
        raise HARParseError("'entries' must be an array")


def parse_har_data(data: Any) -> HARParseResult:
    """Validate an already JSON-decoded HAR document and parse its entries.

    Args:
        data: Decoded HAR document (``{"log": {"entries": [...]}}``).

    Returns:
        HARParseResult containing successfully parsed entries and any errors.

    Raises:
        HARParseError: If the document structure is invalid.
    """
    validate_har_schema(data)
    log_data = data["log"]

    entries: list[HAREntry] = []
    errors: list[ParseError] = []
    for idx, entry_data in enumerate(log_data["entries"]):
        try:
            if not isinstance(entry_data, dict):
                raise TypeError("entry must be an object")
            request_data = entry_data.get("request")
            if not isinstance(request_data, dict):
                raise TypeError("entry.request must be an object")
            response_data = entry_data.get("response") or {}
            if not isinstance(response_data, dict):
                raise TypeError("entry.response must be an object")
            entries.append(
                HAREntry(request=_parse_request(request_data), response=_parse_response(response_data))
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            url = "unknown"
            if isinstance(entry_data, dict) and isinstance(entry_data.get("request"), dict):
                url = str(entry_data["request"].get("url") or "unknown")
            errors.append(ParseError(index=idx, url=url, error=str(exc)))
            LOG.warning("entry_parse_failed", error=str(exc), entry_index=idx, url=url)

    version = log_data.get("version")
    return HARParseResult(
        log=HARLog(entries=entries, version=str(version) if version is not None else None),
        errors=errors,
    )


def parse_har_string(content: str) -> HARParseResult:
    """Parse HAR content from string and return structured result.

    Raises:
        HARParseError: If content structure is invalid (not valid JSON or
            missing required HAR structure).
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise HARParseError(f"Invalid JSON in HAR content: {exc}") from exc

    return parse_har_data(data)


def load_json_file(filepath: Path | str, max_bytes: int = DEFAULT_MAX_HAR_BYTES) -> Any:
    """Read and decode a JSON file, refusing files larger than ``max_bytes``.

    Raises:
        FileNotFoundError: If file does not exist.
        HARParseError: If the file is too large or is not valid JSON.
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"HAR file not found: {filepath}")

    size = filepath.stat().st_size
    if size > max_bytes:
        raise HARParseError(f"HAR file must be smaller than {max_bytes // (1024 * 1024)} MB (got {size} bytes)")

    try:
        with open(filepath, encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise HARParseError(f"Invalid JSON in HAR file: {exc}") from exc


def parse_har_file(filepath: Path | str, max_bytes: int = DEFAULT_MAX_HAR_BYTES) -> HARParseResult:
    """Parse HAR file and return structured result with entries and errors.

    Args:
        filepath: Path to HAR file.
        max_bytes: Largest file size accepted.

    Returns:
        HARParseResult containing parsed entries and any errors.

    Raises:
        HARParseError: If file is too large, not valid JSON, or missing
            required HAR structure.
        FileNotFoundError: If file does not exist.
    """
    result = parse_har_data(load_json_file(filepath, max_bytes=max_bytes))

    LOG.info(
        "har_file_parsed",
        filepath=str(filepath),
        entries=len(result.entries),
        errors=len(result.errors),
    )
    return result
