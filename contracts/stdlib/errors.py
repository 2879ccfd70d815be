# -*- coding: utf-8 -*-
"""
contracts.stdlib.errors
=======================

Error kinds carried as `Revert.code` by the identity contracts. Callers match
on these codes; messages are informational.
"""

INVALID_KEY = "InvalidKey"
INVALID_PURPOSE = "InvalidPurpose"
UNAUTHORIZED_PURPOSE = "UnauthorizedPurpose"
UNAUTHORIZED = "Unauthorized"
UNKNOWN_ACTION = "UnknownAction"
INVALID_DESTINATION = "InvalidDestination"
EXTERNAL_CALL_FAILED = "ExternalCallFailed"
CALL_FAILED = "CallFailed"
DEPLOYMENT_FAILED = "DeploymentFailed"
UNKNOWN_EXECUTION_KIND = "UnknownExecutionKind"
UNKNOWN_CLAIM = "UnknownClaim"
INVALID_TOPIC = "InvalidTopic"
RESERVED_KEY = "ReservedKey"

ALL = (
    INVALID_KEY,
    INVALID_PURPOSE,
    UNAUTHORIZED_PURPOSE,
    UNAUTHORIZED,
    UNKNOWN_ACTION,
    INVALID_DESTINATION,
    EXTERNAL_CALL_FAILED,
    CALL_FAILED,
    DEPLOYMENT_FAILED,
    UNKNOWN_EXECUTION_KIND,
    UNKNOWN_CLAIM,
    INVALID_TOPIC,
    RESERVED_KEY,
)
