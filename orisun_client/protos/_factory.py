"""Helpers that turn hand-written file descriptors into protobuf message classes.

The message shapes are owned by the server. They are declared here as
``FileDescriptorProto`` objects and registered in the default descriptor pool,
so the resulting classes are ordinary protobuf messages (``SerializeToString``,
``FromString``, ``CopyFrom``...) without a protoc generation step.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from google.protobuf import descriptor_pb2, descriptor_pool
from google.protobuf import timestamp_pb2  # noqa: F401  registers google/protobuf/timestamp.proto
from google.protobuf.internal import enum_type_wrapper
from google.protobuf.message_factory import GetMessageClass


FieldProto = descriptor_pb2.FieldDescriptorProto

STRING = FieldProto.TYPE_STRING
BOOL = FieldProto.TYPE_BOOL
INT32 = FieldProto.TYPE_INT32
INT64 = FieldProto.TYPE_INT64
MESSAGE = FieldProto.TYPE_MESSAGE
ENUM = FieldProto.TYPE_ENUM

TIMESTAMP = ".google.protobuf.Timestamp"
TIMESTAMP_PROTO = "google/protobuf/timestamp.proto"


def field(
    name: str,
    number: int,
    kind: int,
    type_name: Optional[str] = None,
    repeated: bool = False,
) -> descriptor_pb2.FieldDescriptorProto:
    f = FieldProto(
        name=name,
        number=number,
        type=kind,
        label=FieldProto.LABEL_REPEATED if repeated else FieldProto.LABEL_OPTIONAL,
    )
    if type_name:
        f.type_name = type_name
    return f


def message(name: str, *fields: descriptor_pb2.FieldDescriptorProto) -> descriptor_pb2.DescriptorProto:
    msg = descriptor_pb2.DescriptorProto(name=name)
    msg.field.extend(fields)
    return msg


def enum(name: str, *values: str) -> descriptor_pb2.EnumDescriptorProto:
    e = descriptor_pb2.EnumDescriptorProto(name=name)
    for number, value in enumerate(values):
        e.value.add(name=value, number=number)
    return e


def register_file(
    name: str,
    package: str,
    messages: Iterable[descriptor_pb2.DescriptorProto],
    enums: Iterable[descriptor_pb2.EnumDescriptorProto] = (),
    dependencies: Iterable[str] = (),
) -> dict[str, Any]:
    """Register a proto3 file and return its message classes and enum wrappers by name."""
    file_proto = descriptor_pb2.FileDescriptorProto(
        name=name,
        package=package,
        syntax="proto3",
        dependency=list(dependencies),
    )
    file_proto.enum_type.extend(enums)
    file_proto.message_type.extend(messages)

    pool = descriptor_pool.Default()
    pool.AddSerializedFile(file_proto.SerializeToString())

    types: dict[str, Any] = {}
    for e in file_proto.enum_type:
        types[e.name] = enum_type_wrapper.EnumTypeWrapper(pool.FindEnumTypeByName(f"{package}.{e.name}"))
    for m in file_proto.message_type:
        types[m.name] = GetMessageClass(pool.FindMessageTypeByName(f"{package}.{m.name}"))
    return types


@dataclass(frozen=True)
class RpcMethod:
    """One RPC of a remote service: full path plus request/response message classes."""

    service: str
    name: str
    request_type: Any
    response_type: Any
    server_streaming: bool = False

    @property
    def path(self) -> str:
        return f"/{self.service}/{self.name}"

    def serialize_request(self, request: Any) -> bytes:
        return request.SerializeToString()

    def deserialize_response(self, data: bytes) -> Any:
        return self.response_type.FromString(data)
