from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .models import ReplicaRecord


class SnapshotMessage(BaseModel):
    """Authoritative replacement of the whole replica set."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["snapshot"] = "snapshot"
    records: tuple[ReplicaRecord, ...]


class DeltaMessage(BaseModel):
    """Current state of a single replica."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["delta"] = "delta"
    record: ReplicaRecord


StreamMessage = Annotated[
    Union[SnapshotMessage, DeltaMessage], Field(discriminator="kind")
]

stream_message_adapter: TypeAdapter[StreamMessage] = TypeAdapter(StreamMessage)
