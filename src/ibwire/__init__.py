"""
ibwire: asyncio client for the TWS / IB Gateway socket API.

A wire-protocol client with:
- Length-prefixed framing and version-gated message decoding
- Typed events delivered to a consumer object, in order
- Synchronous request methods callable from inside callbacks
- Clean, single-shot connection teardown

Quick Start:
    from ibwire import Client, IBConfig, LoggingWrapper

    wrapper = LoggingWrapper()
    client = Client(wrapper, IBConfig.paper(client_id=7))
    wrapper.client = client

    await client.connect()
    await client.wait_until_ready(timeout=10)
    client.req_account_summary(9001, "All", "NetLiquidation")
    await client.wait_closed()
"""

__version__ = "0.1.0"

from ibwire.client import Client, ConnState, InvalidStateTransition
from ibwire.config import IBConfig, IBPort
from ibwire.dispatcher import Dispatcher
from ibwire.errors import (
    ClientError,
    ConnClosedError,
    ConnError,
    ConnRefusedError,
    DecodeError,
    FrameTooLargeError,
    IBWireError,
    InterpretError,
    MalformedFieldError,
    NotConnectedError,
    OrderIdUnavailableError,
    SendFailedError,
    TruncatedError,
    UnknownTagError,
    VersionMismatchError,
)
from ibwire.events import Event
from ibwire.interpreter import MessageInterpreter
from ibwire.models import (
    BarData,
    ComboLeg,
    CommissionReport,
    Contract,
    ContractDetails,
    Execution,
    ExecutionFilter,
    Order,
    OrderState,
    ScannerSubscription,
    TagValue,
)
from ibwire.registry import PendingRequests
from ibwire.wrapper import LoggingWrapper, Wrapper


__all__ = [
    # Models
    "BarData",
    # Client
    "Client",
    # Errors
    "ClientError",
    "ComboLeg",
    "CommissionReport",
    "ConnClosedError",
    "ConnError",
    "ConnRefusedError",
    "ConnState",
    "Contract",
    "ContractDetails",
    "DecodeError",
    "Dispatcher",
    "Event",
    "Execution",
    "ExecutionFilter",
    "FrameTooLargeError",
    "IBConfig",
    "IBPort",
    "IBWireError",
    "InterpretError",
    "InvalidStateTransition",
    "LoggingWrapper",
    "MalformedFieldError",
    "MessageInterpreter",
    "NotConnectedError",
    "Order",
    "OrderIdUnavailableError",
    "OrderState",
    "PendingRequests",
    "ScannerSubscription",
    "SendFailedError",
    "TagValue",
    "TruncatedError",
    "UnknownTagError",
    "VersionMismatchError",
    "Wrapper",
]
