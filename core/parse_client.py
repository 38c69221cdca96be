"""
Parse API Client — Handles authentication and queries against a Parse Server.

Chisel stores everything (sites, content models, model fields, content records
and media items) as Parse classes. This module is responsible for all HTTP
communication with that Parse Server through its REST API:

  GET {server_url}/classes/{ClassName}?where={...}&limit=N

Authentication:
    Every request carries the application id and the master key as headers:

        X-Parse-Application-Id: <app id>
        X-Parse-Master-Key:     <master key>

    The master key bypasses ACLs/CLPs so unpublished schema classes are
    readable. There is no token exchange; the headers are set once on the
    session.

Parse values:
    Parse REST responses encode typed values as JSON objects tagged with
    "__type". ParseObject decodes them lazily on get():

      {"__type": "Pointer", "className": "ct_author", "objectId": "A1"}
          -> ParseObject stub (class_name="ct_author", id="A1")
      {"__type": "Object", "className": ..., "objectId": ..., ...}
          -> ParseObject (an included object)
      {"__type": "File", "name": "y.png", "url": "https://x/y.png"}
          -> ParseFile(name, url)
      {"__type": "Date", "iso": "2024-01-01T00:00:00.000Z"}
          -> timezone-aware datetime

    A malformed typed value raises ParseDecodeError from get(), so a single
    bad property never breaks reading the rest of the record.

Pipeline context:
    Used by every step that talks to the backend: connection check (Step 1),
    media prefetch (Step 2), schema discovery (Step 3) and model record
    queries (Step 4). There is no pagination and no retry: one request per
    query, failures propagate.
"""

import json
from datetime import datetime
from typing import Dict, Any, Optional, List

import requests


class ParseError(RuntimeError):
    """An error body returned by the Parse Server ({"code": ..., "error": ...})."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


class ParseDecodeError(ValueError):
    """A "__type"-tagged Parse value could not be decoded."""


class ParseFile:
    """A Parse File value: the stored file name and its public URL."""

    def __init__(self, name: str, url: Optional[str]):
        self.name = name
        self.url = url

    def to_json(self) -> Dict[str, Any]:
        return {"__type": "File", "name": self.name, "url": self.url}

    def __eq__(self, other):
        return isinstance(other, ParseFile) and (self.name, self.url) == (other.name, other.url)

    def __repr__(self):
        return f"ParseFile(name={self.name!r}, url={self.url!r})"


def parse_date(iso: str) -> datetime:
    """Parse a Parse ISO-8601 timestamp ("2024-01-01T00:00:00.000Z").

    Raises:
        ParseDecodeError: If the string is not a valid timestamp.
    """
    if not isinstance(iso, str):
        raise ParseDecodeError(f"Date value is not a string: {iso!r}")
    try:
        return datetime.fromisoformat(iso.replace("Z", "+00:00"))
    except ValueError as e:
        raise ParseDecodeError(f"Invalid Parse date: {iso!r}") from e


def decode_value(value: Any) -> Any:
    """Decode a raw Parse REST value into its Python representation.

    Args:
        value: A value taken from a Parse REST JSON object.

    Returns:
        ParseObject for pointers and included objects, ParseFile for files,
        datetime for dates, a decoded list for arrays, or the value unchanged.

    Raises:
        ParseDecodeError: If a "__type"-tagged value is missing required keys.
    """
    if isinstance(value, list):
        return [decode_value(v) for v in value]

    if not isinstance(value, dict) or "__type" not in value:
        return value

    value_type = value["__type"]

    if value_type in ("Pointer", "Object"):
        if not value.get("className") or not value.get("objectId"):
            raise ParseDecodeError(f"{value_type} without className/objectId: {value!r}")
        return ParseObject(value["className"], value)

    if value_type == "File":
        if "name" not in value:
            raise ParseDecodeError(f"File without name: {value!r}")
        return ParseFile(value["name"], value.get("url"))

    if value_type == "Date":
        return parse_date(value.get("iso"))

    # Relation, GeoPoint, Bytes, Polygon: handed through untouched
    return value


class ParseObject:
    """Read-only view of one Parse object as returned by the REST API.

    Attributes:
        class_name: The Parse class the object belongs to (its storage table).
        id: The backend-assigned objectId.
    """

    def __init__(self, class_name: str, data: Dict[str, Any]):
        self.class_name = class_name
        self.id = data.get("objectId")
        self._data = data

    def get(self, key: str) -> Any:
        """Return the decoded value of a property, or None when it is not set.

        Raises:
            ParseDecodeError: If the stored value is a malformed typed value.
        """
        return decode_value(self._data.get(key))

    @property
    def created_at(self) -> Optional[datetime]:
        raw = self._data.get("createdAt")
        return parse_date(raw) if raw else None

    @property
    def updated_at(self) -> Optional[datetime]:
        raw = self._data.get("updatedAt")
        return parse_date(raw) if raw else None

    def to_json(self) -> Dict[str, Any]:
        """The object as a Parse pointer, for serializing scalar fields that hold one."""
        return {"__type": "Pointer", "className": self.class_name, "objectId": self.id}

    def __repr__(self):
        return f"ParseObject({self.class_name!r}, id={self.id!r})"


class ParseClient:
    """Client for the Parse Server REST API.

    Manages a requests.Session with the application id and master key headers
    injected once. All queries go through this single session.

    Attributes:
        server_url: Base URL of the Parse Server mount (trailing slash stripped),
                    e.g. "https://chisel.example.com/parse".
        app_id: Parse application id.
        master_key: Parse master key.
        query_limit: The "limit" sent with every find() call.
        timeout: Per-request timeout in seconds.
        debug: If True, print verbose request details.
    """

    def __init__(
        self,
        server_url: str,
        app_id: str,
        master_key: str,
        query_limit: int = 1000,
        timeout: int = 30,
        debug: bool = False,
    ):
        """Initialize the client.

        Args:
            server_url: Base URL of the Parse Server mount.
            app_id: Parse application id.
            master_key: Parse master key.
            query_limit: Maximum number of objects returned by one query.
            timeout: Per-request timeout in seconds.
            debug: Enable verbose output.
        """
        self.server_url = server_url.rstrip("/")
        self.app_id = app_id
        self.master_key = master_key
        self.query_limit = query_limit
        self.timeout = timeout
        self.debug = debug
        self._session = requests.Session()
        self._session.headers.update({
            "X-Parse-Application-Id": app_id,
            "X-Parse-Master-Key": master_key,
            "Content-Type": "application/json",
        })

    @staticmethod
    def pointer(class_name: str, object_id: str) -> Dict[str, str]:
        """Build a Parse pointer, as used in equality constraints on pointer columns."""
        return {"__type": "Pointer", "className": class_name, "objectId": object_id}

    def test_connection(self) -> Dict[str, Any]:
        """Call GET /health to check the server is reachable and the URL is right.

        Returns:
            The health response body (e.g. {"status": "ok"}).

        Raises:
            requests.HTTPError: If the server responds with an error status.
        """
        url = f"{self.server_url}/health"
        if self.debug:
            print(f"  Checking Parse Server health: {url}")
        response = self._session.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def find(self, class_name: str, where: Optional[Dict[str, Any]] = None) -> List[ParseObject]:
        """Run a find query on a Parse class.

        Calls GET /classes/{class_name} with the JSON-encoded where clause and
        the configured limit. Only the first page is read.

        Args:
            class_name: The Parse class to query (e.g. "Model", "ct_post").
            where: Optional equality constraints, e.g. {"isDisabled": False}.

        Returns:
            The matching objects, in server order.

        Raises:
            ParseError: If the server returns a Parse error body, or a body
                        that is not a JSON object with a "results" list.
            requests.HTTPError: If the HTTP request fails.
        """
        url = f"{self.server_url}/classes/{class_name}"
        params = {"limit": self.query_limit}
        if where:
            params["where"] = json.dumps(where)

        if self.debug:
            print(f"  Querying {class_name} where={params.get('where', '{}')}")

        response = self._session.get(url, params=params, timeout=self.timeout)
        body = self._json_or_none(response)

        if isinstance(body, dict) and "error" in body:
            raise ParseError(
                f"Parse query on {class_name} failed: {body['error']}",
                code=body.get("code"),
            )
        response.raise_for_status()

        if not isinstance(body, dict) or not isinstance(body.get("results"), list):
            raise ParseError(
                f"Parse query on {class_name} returned no results list "
                f"(is PARSE_SERVER_URL the Parse mount?)"
            )
        results = body["results"]

        if self.debug:
            print(f"  Found {len(results)} {class_name} object(s)")

        return [ParseObject(class_name, item) for item in results]

    @staticmethod
    def _json_or_none(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None
