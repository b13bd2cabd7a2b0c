"""Wire Codec (encode + results) — Tasks into requests, results into/out of responses.

Tests cover:
    - Empty tasks and batched Get tasks refuse to encode
    - Method, URL, headers and body per kind
    - decode_task(encode_task(t)) keeps user, kind and per-command fields
    - encode_task_result / decode_task_result with success and failure shapes
"""

import json

import httpx
import pytest
from pydantic import BaseModel

from quark_rest.core.commands import (
    DeleteCmd, GetCmd, PatchCmd, PostCmd, PutCmd, StatusCode, Task, TaskResult,
)
from quark_rest.core.errors import TaskEncodeError, TaskResultDecodeError, UnknownResourceError
from quark_rest.services.wire_codec import format_query_value
from tests.fakes import Host, Zone


class HostList(BaseModel):
    hosts: list[Host]


class ErrorBody(BaseModel):
    error: dict


def test_encode_empty_task_fails(protocol):
    with pytest.raises(TaskEncodeError, match="encode empty task"):
        protocol.encode_task(Task(user="alice"))


def test_encode_batched_get_fails(protocol):
    task = Task(cmds=[GetCmd("Host"), GetCmd("Host", {"name": "web1"})])
    with pytest.raises(TaskEncodeError, match="doesn't support batch"):
        protocol.encode_task(task)


def test_encode_get_uses_query_string(protocol):
    task = Task(user="alice", cmds=[GetCmd("Host", {"name": "web1", "up": True})])
    request = protocol.encode_task(task)
    assert request.method == "GET"
    assert (request.url.host, request.url.port, request.url.path) == ("dns.test", 8080, "/dns")
    assert dict(request.url.params) == {
        "resource_type": "Host", "zdnsuser": "alice", "name": "web1", "up": "true",
    }
    assert request.content == b""


def test_encode_sets_fixed_headers(protocol):
    request = protocol.encode_task(Task(cmds=[DeleteCmd("Host", "1")]))
    assert request.headers["content-type"] == "application/json;charset=utf-8"
    assert request.headers["accept"] == "*/*"


def test_encode_post_builds_envelope(protocol):
    task = Task(user="alice", cmds=[
        PostCmd(Host(id="1", name="web1")), PostCmd(Host(id="2", name="web2")),
    ])
    request = protocol.encode_task(task)
    assert request.method == "POST"
    assert str(request.url) == "http://dns.test:8080/dns"
    body = json.loads(request.content)
    assert body == {
        "resource_type": "Host",
        "zdnsuser": "alice",
        "attrs": [
            {"id": "1", "name": "web1", "ip": ""},
            {"id": "2", "name": "web2", "ip": ""},
        ],
    }


def test_encode_put_uses_put_method(protocol):
    request = protocol.encode_task(Task(cmds=[PutCmd(Zone(id="z", ttl=5))]))
    assert request.method == "PUT"
    assert json.loads(request.content)["resource_type"] == "zone"


def test_encode_delete_builds_id_entries(protocol):
    task = Task(user="bob", cmds=[DeleteCmd("Host", "1"), DeleteCmd("Host", "2")])
    body = json.loads(protocol.encode_task(task).content)
    assert body == {
        "resource_type": "Host", "zdnsuser": "bob", "attrs": [{"id": "1"}, {"id": "2"}],
    }


def test_encode_patch_builds_new_attrs_entries(protocol):
    task = Task(cmds=[PatchCmd("Host", "1", {"ip": "10.0.0.2"})])
    request = protocol.encode_task(task)
    assert request.method == "PATCH"
    assert json.loads(request.content)["attrs"] == [
        {"id": "1", "new_attrs": {"ip": "10.0.0.2"}},
    ]


@pytest.mark.parametrize("value,expected", [
    ("web1", "web1"), (5, "5"), (True, "true"), (False, "false"), (None, ""), (1.5, "1.5"),
])
def test_format_query_value(value, expected):
    assert format_query_value(value) == expected


# ─── Round trip ─────────────────────────────────────────────────


@pytest.mark.parametrize("task", [
    Task(user="alice", cmds=[GetCmd("Host", {"name": "web1"})]),
    Task(user="alice", cmds=[GetCmd("Host", {"name": "web1", "offset": 20, "limit": 10})]),
    Task(user="alice", cmds=[PostCmd(Host(id="1", name="a")), PostCmd(Host(id="2", name="b"))]),
    Task(user="", cmds=[PutCmd(Zone(id="z1", ttl=30))]),
    Task(user="bob", cmds=[DeleteCmd("Host", "1"), DeleteCmd("Host", "2")]),
    Task(user="bob", cmds=[PatchCmd("Host", "1", {"ip": "10.0.0.3", "tags": ["a"]})]),
], ids=["get", "get-paged", "post", "put", "delete", "patch"])
def test_decode_inverts_encode(protocol, task):
    decoded = protocol.decode_task(protocol.encode_task(task))
    assert decoded.user == task.user
    assert decoded.kind is task.kind
    assert decoded.cmds == task.cmds


def test_paging_only_round_trips_with_positive_limit(protocol):
    task = Task(cmds=[GetCmd("Host", {"offset": 5, "limit": 0})])
    decoded = protocol.decode_task(protocol.encode_task(task))
    assert decoded.cmds[0].conds == {}


# ─── Results ────────────────────────────────────────────────────


def test_encode_task_result_uses_code_and_payload(protocol):
    response = protocol.encode_task_result(TaskResult(code=200, result={"hosts": []}))
    assert response.status_code == 200
    assert json.loads(response.body) == {"hosts": []}


def test_encode_task_result_with_list_of_resources(protocol):
    hosts = [Host(id="1", name="web1"), Host(id="2", name="web2", ip="10.0.0.2")]
    response = protocol.encode_task_result(TaskResult(code=200, result=hosts))
    assert json.loads(response.body) == [
        {"id": "1", "name": "web1", "ip": ""},
        {"id": "2", "name": "web2", "ip": "10.0.0.2"},
    ]


def test_encode_task_result_with_resource_inside_dict(protocol):
    result = {"total": 1, "zone": Zone(id="z1", ttl=60)}
    response = protocol.encode_task_result(TaskResult(code=StatusCode.SUCCEED, result=result))
    assert json.loads(response.body) == {"total": 1, "zone": {"id": "z1", "ttl": 60}}


def test_encode_empty_task_result_is_null(protocol):
    response = protocol.encode_task_result(TaskResult(code=StatusCode.SUCCEED))
    assert response.body == b"null"


def test_decode_success_into_success_shape(protocol):
    response = httpx.Response(200, json={"hosts": [{"id": "1", "name": "web1"}]})
    result = protocol.decode_task_result(response, HostList, ErrorBody)
    assert result.code == 200
    assert result.result == HostList(hosts=[Host(id="1", name="web1")])


def test_decode_failure_into_failure_shape(protocol):
    error = UnknownResourceError("delete", "Host", "9")
    response = httpx.Response(400, json=error.to_response())
    result = protocol.decode_task_result(response, HostList, ErrorBody)
    assert result.code == 400
    assert result.result.error["code"] == "UNKNOWN_RESOURCE"


def test_decode_without_shape_leaves_result_empty(protocol):
    response = httpx.Response(404, text="not json at all")
    result = protocol.decode_task_result(response, HostList)
    assert result == TaskResult(code=404, result=None)


def test_decode_body_not_matching_shape_fails(protocol):
    response = httpx.Response(200, json={"unexpected": True})
    with pytest.raises(TaskResultDecodeError, match="not a valid HostList"):
        protocol.decode_task_result(response, HostList)
