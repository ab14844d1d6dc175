"""HTTP client for communicating with the GSC server."""

import os
import uuid
from typing import Iterator, Optional, TypeVar
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from gsc.config import Config
from gsc.errors import (
    BadLocalPath,
    BadResponse,
    LoginPlease,
    NoSuchLocalFile,
    ServerError,
    TransportError,
    UnknownHomework,
)
from gsc.logging_config import get_logger
from gsc.messages import (
    Eval,
    FileMeta,
    FileMetaChange,
    JsonError,
    SelfEvalChange,
    Submission,
    SubmissionChange,
    SubmissionShort,
    User,
    UserChange,
    UserCreate,
    UserRole,
)
from gsc.paths import RemotePattern

logger = get_logger(__name__)

CHUNK_SIZE = 8192

T = TypeVar('T')


def parse_cookie(header: str) -> Optional[tuple[str, str]]:
    """
    Extract the ``key=value`` pair from one Set-Cookie header.

    Args:
        header: Raw header value, e.g. ``session=abc; Path=/; HttpOnly``

    Returns:
        (key, value) or None if the header has no pair
    """
    pair = header.split(';', 1)[0]
    key, sep, value = pair.partition('=')
    if not sep:
        return None
    return key.strip(), value.strip()


def parse_cookies(headers: list[str]) -> Optional[tuple[str, str]]:
    """Return the first cookie pair found among several Set-Cookie headers."""
    for header in headers:
        pair = parse_cookie(header)
        if pair is not None:
            return pair
    return None


def _read_chunks(path: str) -> Iterator[bytes]:
    with open(path, 'rb') as f:
        while True:
            chunk = f.read(CHUNK_SIZE)
            if not chunk:
                break
            yield chunk


class GscClient:
    """
    Blocking HTTP client for the GSC REST API.

    Every request carries the session cookie from the config; a refreshed
    cookie from the server's Set-Cookie header is saved back immediately.
    Requests are never retried.
    """

    def __init__(self, config: Config):
        """
        Initialize client.

        Args:
            config: Configuration instance
        """
        self.config = config
        self.session = httpx.Client(
            base_url=config.get_endpoint(),
            timeout=config.get_timeout()
        )
        self.request_id = None
        self._submission_uris: dict[str, dict[int, str]] = {}
        logger.debug(f"Initialized GscClient [endpoint={config.get_endpoint()}]")

    def reset_cache(self) -> None:
        """Forget cached submission URIs; called at the start of every command."""
        self._submission_uris.clear()

    # --- request plumbing ---

    def _cookie_header(self) -> dict:
        cookie = self.config.get_cookie()
        if cookie is None:
            raise LoginPlease()
        key, value = cookie
        return {'Cookie': f"{key}={value}"}

    def _prepare_headers(self, kwargs: dict, authenticated: bool) -> None:
        self.request_id = str(uuid.uuid4())
        headers = kwargs.setdefault('headers', {})
        headers['X-Request-ID'] = self.request_id
        if authenticated:
            headers.update(self._cookie_header())

    def _save_cookie(self, response: httpx.Response) -> None:
        pair = parse_cookies(response.headers.get_list('set-cookie'))
        if pair is not None:
            logger.debug(f"Received cookie {pair[0]}=*** [request_id={self.request_id}]")
            self.config.set_cookie(*pair)

    def _server_error(self, response: httpx.Response) -> ServerError:
        """
        Build the error for a non-2xx response, keeping the server's own
        status, title and message when it sent them.
        """
        try:
            error = JsonError.model_validate(response.json())
            return ServerError(error.status, error.title, error.message)
        except (ValueError, ValidationError):
            return ServerError(
                response.status_code,
                response.reason_phrase or 'Server error',
                response.text.strip()
            )

    def _handle_response(self, method: str, url: str, response: httpx.Response) -> None:
        logger.debug(
            f"Response received: {method} {url} status={response.status_code} [request_id={self.request_id}]"
        )
        self._save_cookie(response)
        if not response.is_success:
            if not response.is_stream_consumed:
                response.read()
            raise self._server_error(response)

    def _request(
        self,
        method: str,
        url: str,
        authenticated: bool = True,
        **kwargs
    ) -> httpx.Response:
        """
        Make one HTTP request.

        Args:
            method: HTTP method (GET, PUT, PATCH, DELETE...)
            url: Path relative to the endpoint, or absolute URL
            authenticated: Attach the session cookie
            **kwargs: Additional arguments to pass to httpx request

        Returns:
            Successful HTTP response

        Raises:
            LoginPlease: If authentication is needed but no cookie is stored
            ServerError: On a non-2xx response
            TransportError: If the request could not be made
        """
        self._prepare_headers(kwargs, authenticated)
        logger.debug(f"Making request: {method} {url} [request_id={self.request_id}]")

        try:
            response = self.session.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise TransportError(f"Request {method} {url} failed: {e}") from e

        self._handle_response(method, url, response)
        return response

    def _parse(self, response: httpx.Response, type_: type[T]) -> T:
        try:
            return TypeAdapter(type_).validate_json(response.content)
        except ValidationError as e:
            raise BadResponse("Could not understand response from server") from e

    # --- accounts ---

    def authenticate(self, username: str, password: str) -> None:
        """
        Log in with a password; the server answers with a session cookie.

        Args:
            username: Username
            password: Password

        Raises:
            ServerError: 401 on a wrong password
        """
        self._request('GET', f'/api/users/{quote(username, safe="")}',
                      authenticated=False, auth=(username, password))
        self.config.set_username(username)
        logger.info(f"Authenticated as {username}")

    def create_account(self, username: str, password: str) -> None:
        self._request('POST', '/api/users', authenticated=False, auth=(username, password))
        self.config.set_username(username)

    def change_password(self, user: str, password: str) -> None:
        self.update_user(user, UserChange(password=password))

    def fetch_user(self, user: str) -> User:
        response = self._request('GET', f'/api/users/{quote(user, safe="")}')
        return self._parse(response, User)

    def fetch_raw_user(self, user: str) -> str:
        return self._request('GET', f'/api/users/{quote(user, safe="")}').text

    def update_user(self, user: str, change: UserChange) -> None:
        self._request('PATCH', f'/api/users/{quote(user, safe="")}', json=change.to_json())

    def add_user(self, name: str, role: UserRole) -> None:
        body = UserCreate(name=name, role=role).model_dump(mode='json')
        self._request('POST', '/api/users', json=body)

    def delete_user(self, name: str) -> None:
        self._request('DELETE', f'/api/users/{quote(name, safe="")}')

    # --- submissions ---

    def fetch_submissions(self, user: str) -> list[SubmissionShort]:
        response = self._request('GET', f'/api/users/{quote(user, safe="")}/submissions')
        return self._parse(response, list[SubmissionShort])

    def fetch_assignment_submissions(self, hw: int) -> list[SubmissionShort]:
        response = self._request('GET', f'/api/submissions/hw{hw}')
        return self._parse(response, list[SubmissionShort])

    def fetch_raw_assignment_submissions(self, hw: int) -> str:
        return self._request('GET', f'/api/submissions/hw{hw}').text

    def submission_uri(self, user: str, hw: int) -> str:
        """
        Find the URI of ``user``'s submission for homework ``hw``.

        The list of submissions is fetched once per user per command.

        Raises:
            LoginPlease: If no user is known
            UnknownHomework: If the user has no such submission
        """
        if not user:
            raise LoginPlease()
        uris = self._submission_uris.get(user)
        if uris is None:
            uris = {s.assignment_number: s.uri for s in self.fetch_submissions(user)}
            self._submission_uris[user] = uris
        try:
            return uris[hw]
        except KeyError:
            raise UnknownHomework(hw) from None

    def fetch_submission(self, user: str, hw: int) -> Submission:
        response = self._request('GET', self.submission_uri(user, hw))
        return self._parse(response, Submission)

    def fetch_raw_submission(self, user: str, hw: int) -> str:
        return self._request('GET', self.submission_uri(user, hw)).text

    def update_submission(self, user: str, hw: int, change: SubmissionChange) -> None:
        self._request('PATCH', self.submission_uri(user, hw), json=change.to_json())

    def grades_csv(self) -> str:
        return self._request('GET', '/api/grades.csv').text

    # --- files ---

    def fetch_file_list(self, user: str, hw: int) -> list[FileMeta]:
        """
        Fetch metadata of every file of a submission.

        Args:
            user: Owner of the submission
            hw: Homework number

        Returns:
            List of FileMeta
        """
        response = self._request('GET', self.submission_uri(user, hw) + '/files')
        return self._parse(response, list[FileMeta])

    def fetch_raw_file_list(self, user: str, hw: int) -> str:
        return self._request('GET', self.submission_uri(user, hw) + '/files').text

    def upload_file(self, user: str, src: str, dst: RemotePattern) -> None:
        """
        Upload a local file into a named remote slot, replacing any file of that name.

        Args:
            user: Owner of the submission
            src: Local path
            dst: Remote file (name must be non-empty)

        Raises:
            NoSuchLocalFile: If src does not exist
            BadLocalPath: If src is a directory
        """
        if os.path.isdir(src):
            raise BadLocalPath(src)
        if not os.path.exists(src):
            raise NoSuchLocalFile(src)
        uri = f"{self.submission_uri(user, dst.hw)}/files/{quote(dst.name, safe='')}"
        logger.info(f"Uploading ‘{src}’ -> ‘{dst}’...")
        self._request('PUT', uri, content=_read_chunks(src),
                      headers={'Content-Length': str(os.path.getsize(src))})

    def download_file(self, meta: FileMeta, dst: str) -> None:
        """
        Stream a remote file into a local path (truncating it).

        The local file is only opened once the server has answered with
        success, so a failed request leaves an existing file intact.

        Args:
            meta: Remote file
            dst: Local destination path
        """
        kwargs: dict = {}
        self._prepare_headers(kwargs, authenticated=True)
        logger.info(f"Downloading ‘{meta}’ -> ‘{dst}’...")
        try:
            with self.session.stream('GET', meta.uri, **kwargs) as response:
                self._handle_response('GET', meta.uri, response)
                parent = os.path.dirname(dst)
                if parent:
                    os.makedirs(parent, exist_ok=True)
                with open(dst, 'wb') as f:
                    for chunk in response.iter_bytes(chunk_size=CHUNK_SIZE):
                        f.write(chunk)
        except httpx.HTTPError as e:
            raise TransportError(f"Downloading {meta} failed: {e}") from e

    def fetch_file_content(self, meta: FileMeta) -> bytes:
        return self._request('GET', meta.uri).content

    def delete_file(self, meta: FileMeta) -> None:
        logger.info(f"Deleting remote file ‘{meta}’...")
        self._request('DELETE', meta.uri)

    def change_file(self, meta: FileMeta, change: FileMetaChange) -> None:
        self._request('PATCH', meta.uri, json=change.to_json())

    # --- evaluations ---

    def fetch_eval(self, user: str, hw: int, number: int) -> Eval:
        response = self._request('GET', f"{self.submission_uri(user, hw)}/evals/{number}")
        return self._parse(response, Eval)

    def set_self_eval(self, eval_: Eval, change: SelfEvalChange) -> None:
        self._request('PUT', f"{eval_.uri}/self", json=change.model_dump(mode='json'))

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()
