# models/webhook_payload.py

import json
import logging
from typing import List, Union

from pydantic import BaseModel, Field, ValidationError

from errors import IgnoredNotMaster, MalformedPayload

logger = logging.getLogger(__name__)

MASTER_REF = "refs/heads/master"
NOT_MASTER = "not master"


class RefChange(BaseModel):
    ref_id: str = Field("", alias="refId")


class BitbucketServerWebhook(BaseModel):
    """Bitbucket Server push payload, stripped down to the changed refs."""
    ref_changes: List[RefChange] = Field(..., alias="refChanges")

    def changed_ref(self) -> str:
        for change in self.ref_changes:
            if change.ref_id == MASTER_REF:
                return MASTER_REF
        return NOT_MASTER


class GitLabWebhook(BaseModel):
    """GitLab push payload, only the pushed ref."""
    ref: str

    def changed_ref(self) -> str:
        return self.ref


WebhookEvent = Union[BitbucketServerWebhook, GitLabWebhook]

# Tried in this order; the first schema that validates wins.
SCHEMAS = (BitbucketServerWebhook, GitLabWebhook)


def parse_payload(body: bytes) -> WebhookEvent:
    """
    Decode a raw webhook body against the known schemas.

    Raises:
        MalformedPayload: if the body is not JSON or matches no schema.
    """
    try:
        payload = json.loads(body)
    except ValueError as e:
        raise MalformedPayload(e)

    last_error = None
    for schema in SCHEMAS:
        try:
            event = schema.model_validate(payload)
        except ValidationError as e:
            logger.debug(f"Payload does not match {schema.__name__}: {e}")
            last_error = e
            continue
        logger.debug(f"Payload decoded as {schema.__name__}")
        return event

    raise MalformedPayload(last_error)


def require_master_change(event: WebhookEvent) -> str:
    ref = event.changed_ref()
    if ref != MASTER_REF:
        raise IgnoredNotMaster(ref)
    return ref
