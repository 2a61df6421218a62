import json
from typing import Callable, Optional

import pytest

from cluster_client import Connection, ConnectivityError, HostDescription, HostSet, Request, RequestType, Response

Behaviour = Callable[[HostDescription, Request], object]


class ScriptedConnection(Connection):
    """Connection whose answers come from the owning ScriptedCluster."""

    def __init__(self, description: HostDescription, dispatch: Behaviour):
        self.description = description
        self.dispatch = dispatch
        self.requests: list[Request] = []
        self.jwt: Optional[str] = None
        self.close_calls = 0

    def execute(self, request: Request) -> Response:
        self.requests.append(request)
        outcome = self.dispatch(self.description, request)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def set_jwt(self, jwt):
        self.jwt = jwt

    def close(self):
        self.close_calls += 1


class ScriptedCluster:
    """Connection factory simulating a set of coordinators.

    Hosts answer 200 with an empty object unless told otherwise.
    """

    def __init__(self):
        self.behaviours: dict[str, Behaviour] = {}
        self.connections: dict[str, ScriptedConnection] = {}
        self.calls: list[str] = []

    def __call__(self, description: HostDescription) -> ScriptedConnection:
        connection = ScriptedConnection(description, self._dispatch)
        self.connections[str(description)] = connection
        return connection

    def down(self, address: str) -> None:
        self.behaviours[address] = lambda d, r: ConnectivityError(str(d), reason="Connection refused")

    def up(self, address: str) -> None:
        self.behaviours.pop(address, None)

    def answer(self, address: str, status: int = 200, body: object = None, headers: Optional[dict] = None) -> None:
        raw = json.dumps(body).encode() if body is not None else b"{}"
        self.behaviours[address] = lambda d, r: Response(status=status, headers=headers or {}, body=raw)

    def behave(self, address: str, behaviour: Behaviour) -> None:
        self.behaviours[address] = behaviour

    def attempts(self, address: str) -> int:
        connection = self.connections.get(address)
        return len(connection.requests) if connection else 0

    def _dispatch(self, description: HostDescription, request: Request) -> object:
        self.calls.append(str(description))
        behaviour = self.behaviours.get(str(description))
        if behaviour is None:
            return Response(status=200, body=b"{}")
        return behaviour(description, request)


@pytest.fixture
def cluster():
    return ScriptedCluster()


@pytest.fixture
def make_hosts(cluster):
    def factory(*addresses: str, jwt: Optional[str] = None) -> HostSet:
        return HostSet(cluster, [HostDescription.parse(a) for a in addresses], jwt=jwt)

    return factory


@pytest.fixture
def get_request():
    return Request(request_type=RequestType.GET, path="/_api/version")
