"""Request executor: runs one logical request against the cluster.

Only transport failures drive failover.  A host that answered, even
with an error, is reachable: retrying elsewhere would not fix the
error and would hide it from the caller.
"""

from __future__ import annotations

import logging
from time import time

from prometheus_client import Counter, Histogram
from pydantic import ValidationError

from ..cache.document_cache import DocumentRevisionCache
from ..exceptions import (
    ApplicationError,
    ConnectivityError,
    ExhaustedRetriesError,
    RedirectError,
    RequestTimeoutError,
)
from ..models import AccessType, DocumentRevision, ErrorEntity, HostDescription, Request, RequestType, Response
from .host import Host
from .host_handle import HostHandle
from .host_handlers.host_handler import HostHandler

logger = logging.getLogger(__name__)

REQUEST_EXE_COUNTER = Counter("cc_request_exe_total", "Total number of cluster requests executed", ["access_type"])
REQUEST_EXE_DURATION_HISTOGRAM = Histogram("cc_request_exe_duration_seconds", "Duration of cluster requests in seconds", ["access_type"])
REQUEST_FAILOVER_COUNTER = Counter("cc_request_failover_total", "Total number of attempts that failed over to another host", ["host"])
REQUEST_EXHAUSTED_COUNTER = Counter("cc_request_exhausted_total", "Total number of requests that could not reach any host")
REQUEST_ERROR_COUNTER = Counter("cc_request_error_total", "Total number of requests rejected by the server", ["status_code"])

DEFAULT_MAX_REDIRECTS = 3
SILENT_PARAM = "silent"
DIRTY_READ_HEADER = "x-arango-allow-dirty-read"


class RequestExecutor:
    """Send requests through a :class:`HostHandler`, failing over as needed.

    Parameters:
        host_handler: Failover policy shared by all requests.
        document_cache: Receives the revision of documents written by
            successful WRITE requests. ``None`` disables caching.
        max_redirects: Redirects followed per request before the
            :class:`RedirectError` is surfaced.
    """

    def __init__(
        self,
        host_handler: HostHandler,
        document_cache: DocumentRevisionCache | None = None,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
    ) -> None:
        self._host_handler = host_handler
        self._document_cache = document_cache
        self._max_redirects = max_redirects

    @property
    def host_handler(self) -> HostHandler:
        return self._host_handler

    def execute(
        self,
        request: Request,
        host_handle: HostHandle | None = None,
        access_type: AccessType | None = None,
    ) -> Response:
        """Execute *request* on the first host able to serve it.

        Args:
            request: The request to send.
            host_handle: Optional sticky hint; updated with the host
                that served the request.
            access_type: Defaults to READ for GET/HEAD, WRITE otherwise.

        Returns:
            The successful :class:`Response`.

        Raises:
            ApplicationError: If a host rejected the request.
            RedirectError: If redirects exceeded ``max_redirects``.
            RequestTimeoutError: If a host did not answer in time.
            ExhaustedRetriesError: If no host could be reached.
        """
        access_type = access_type or request.default_access_type
        if access_type == AccessType.DIRTY_READ and DIRTY_READ_HEADER not in request.headers:
            request = request.model_copy(update={"headers": {**request.headers, DIRTY_READ_HEADER: "true"}})
        start_time: float = time()
        REQUEST_EXE_COUNTER.labels(access_type=access_type.value).inc()
        try:
            return self._execute(request, host_handle, access_type)
        except ExhaustedRetriesError as e:
            REQUEST_EXHAUSTED_COUNTER.inc()
            logger.error(
                "Cannot contact any host while executing %s %s (%d failures)",
                request.request_type.value,
                request.url_path,
                len(e.causes),
            )
            raise
        except BaseException as e:
            # Abandoned by the caller: leave a clean episode behind
            if not isinstance(e, Exception):
                self._host_handler.reset()
            raise
        finally:
            duration: float = time() - start_time
            REQUEST_EXE_DURATION_HISTOGRAM.labels(access_type=access_type.value).observe(duration)

    def _execute(self, request: Request, host_handle: HostHandle | None, access_type: AccessType) -> Response:
        redirects = 0
        while True:
            # Raises the aggregated failure once the episode is exhausted
            host = self._host_handler.get(host_handle, access_type)
            try:
                response = host.send(request)
            except ConnectivityError as e:
                self._on_connectivity_failure(host, request, host_handle, e)
                continue
            except RequestTimeoutError:
                self._host_handler.reset()
                raise
            except OSError as e:
                cause = ConnectivityError(str(host.description), reason=str(e))
                cause.__cause__ = e
                self._on_connectivity_failure(host, request, host_handle, cause)
                continue

            location = _redirect_location(response)
            if location is not None:
                error = RedirectError(ErrorEntity.from_response(response), location)
                if redirects >= self._max_redirects:
                    self._host_handler.reset()
                    raise error
                redirects += 1
                logger.info("Redirected from %s to %s", host.description, location)
                self._host_handler.fail_if_not_match(location, error)
                host_handle = (host_handle or HostHandle()).set_host(location)
                continue

            if not response.is_success:
                error = ApplicationError(ErrorEntity.from_response(response))
                REQUEST_ERROR_COUNTER.labels(status_code=response.status).inc()
                # The host answered: drop failures recorded earlier in this call
                self._host_handler.reset()
                logger.debug("Request rejected by %s: %s", host.description, error)
                raise error

            self._host_handler.success()
            if host_handle is not None:
                host_handle.set_host(host.description)
            self._update_document_cache(request, response, access_type)
            return response

    def _on_connectivity_failure(
        self,
        host: Host,
        request: Request,
        host_handle: HostHandle | None,
        cause: ConnectivityError,
    ) -> None:
        REQUEST_FAILOVER_COUNTER.labels(host=str(host.description)).inc()
        self._host_handler.fail(cause)
        if host_handle is not None:
            host_handle.set_host(None)
        logger.warning(
            "Could not connect to %s while executing %s %s, trying next host: %s",
            host.description,
            request.request_type.value,
            request.url_path,
            cause,
        )

    def _update_document_cache(self, request: Request, response: Response, access_type: AccessType) -> None:
        if self._document_cache is None or access_type != AccessType.WRITE:
            return
        if str(request.query_params.get(SILENT_PARAM, "")).lower() == "true":
            return
        try:
            payload = response.body_json()
        except ValueError:
            logger.debug("Write response of %s is not JSON; revision not cached", request.url_path)
            return
        if not isinstance(payload, dict):
            return
        try:
            revision = DocumentRevision(id=payload["_id"], key=payload["_key"], rev=payload["_rev"])
        except (KeyError, ValidationError):
            return

        identity = request.document_identity if request.document_identity is not None else revision.id
        if request.request_type == RequestType.DELETE:
            self._document_cache.remove(identity)
        else:
            self._document_cache.set_values(identity, revision)


def _redirect_location(response: Response) -> HostDescription | None:
    """Target host of a redirect answer, or None if *response* is not one."""
    if response.status == 503:
        location = response.header("x-arango-endpoint")
    elif response.status in (307, 308):
        location = response.header("location")
    else:
        return None
    if not location:
        return None
    try:
        return HostDescription.parse(location)
    except ValueError:
        logger.warning("Ignoring unparsable redirect location: %s", location)
        return None
