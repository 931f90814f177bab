"""
Anvil / Ethereum dev-node method catalog.

Every descriptor's invocation function closes over the transport passed to
build_method_categories(); nothing here holds a process-wide client. Argument
conversion (ETH -> wei hex, decimal -> quantity) and response shaping
(hex quantity -> decimal string) are specific to each procedure and live in
its function.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Sequence

from rpcdeck.abstractions.dto.methods import Invoker, MethodCategory, MethodDescriptor, ParameterSpec
from rpcdeck.domain.units import eth_to_wei_hex, from_hex, to_quantity, wei_hex_to_eth
from rpcdeck.interfaces.services.transport import ITransport

ADDRESS = ParameterSpec("address", "hex", "0x...")
TX_HASH = ParameterSpec("txHash", "hex", "0x...")


def _decimal(result: Any) -> Any:
    """Re-express a hex quantity as a decimal string; other values pass through."""
    if isinstance(result, str) and result[:2].lower() == "0x":
        return str(from_hex(result))
    return result


def _rpc(
    transport: ITransport,
    rpc_method: str,
    build: Optional[Callable[..., List[Any]]] = None,
    shape: Optional[Callable[[Any], Any]] = None,
) -> Invoker:
    async def invoke(*args: str) -> Any:
        params = build(*args) if build else list(args)
        result = await transport.send(rpc_method, params)
        return shape(result) if shape else result

    invoke.__name__ = rpc_method
    return invoke


def _method(
    name: str,
    label: str,
    rpc_method: str,
    method: Invoker,
    params: Sequence[ParameterSpec] = (),
    description: Optional[str] = None,
) -> MethodDescriptor:
    return MethodDescriptor(
        name=name,
        label=label,
        method=method,
        params=tuple(params),
        description=description,
        rpc_method=rpc_method,
    )


def _standard(t: ITransport) -> Dict[str, MethodDescriptor]:
    return {
        "getAccounts": _method(
            "getAccounts", "Get Accounts", "eth_accounts",
            _rpc(t, "eth_accounts"),
            description="Returns a list of addresses owned by client",
        ),
        "getBalance": _method(
            "getBalance", "Get Balance", "eth_getBalance",
            _rpc(t, "eth_getBalance", lambda address: [address, "latest"], wei_hex_to_eth),
            params=[ADDRESS],
            description="Returns the balance of the given address in ETH",
        ),
        "getBlockNumber": _method(
            "getBlockNumber", "Get Block Number", "eth_blockNumber",
            _rpc(t, "eth_blockNumber", shape=_decimal),
            description="Returns the current block number",
        ),
        "getChainId": _method(
            "getChainId", "Get Chain ID", "eth_chainId",
            _rpc(t, "eth_chainId", shape=_decimal),
            description="Returns the chain id of the node",
        ),
        "getGasPrice": _method(
            "getGasPrice", "Get Gas Price", "eth_gasPrice",
            _rpc(t, "eth_gasPrice", shape=_decimal),
            description="Returns the current gas price in wei",
        ),
        "getTransactionCount": _method(
            "getTransactionCount", "Get Transaction Count", "eth_getTransactionCount",
            _rpc(t, "eth_getTransactionCount", lambda address: [address, "latest"], _decimal),
            params=[ADDRESS],
            description="Returns the number of transactions sent from an address",
        ),
        "getCode": _method(
            "getCode", "Get Code", "eth_getCode",
            _rpc(t, "eth_getCode", lambda address: [address, "latest"]),
            params=[ADDRESS],
            description="Returns the bytecode deployed at an address",
        ),
        "getTransactionReceipt": _method(
            "getTransactionReceipt", "Get Transaction Receipt", "eth_getTransactionReceipt",
            _rpc(t, "eth_getTransactionReceipt"),
            params=[TX_HASH],
            description="Returns the receipt of a mined transaction",
        ),
    }


def _anvil(t: ITransport) -> Dict[str, MethodDescriptor]:
    return {
        "impersonateAccount": _method(
            "impersonateAccount", "Impersonate Account", "anvil_impersonateAccount",
            _rpc(t, "anvil_impersonateAccount"),
            params=[ADDRESS],
            description="Impersonate an address for sending transactions",
        ),
        "stopImpersonatingAccount": _method(
            "stopImpersonatingAccount", "Stop Impersonating Account", "anvil_stopImpersonatingAccount",
            _rpc(t, "anvil_stopImpersonatingAccount"),
            params=[ADDRESS],
            description="Stop impersonating an address",
        ),
        "setBalance": _method(
            "setBalance", "Set Balance", "anvil_setBalance",
            _rpc(t, "anvil_setBalance", lambda address, balance: [address, eth_to_wei_hex(balance)]),
            params=[ADDRESS, ParameterSpec("balance", "number", "Balance in ETH")],
            description="Sets the balance of an address",
        ),
        "setNonce": _method(
            "setNonce", "Set Nonce", "anvil_setNonce",
            _rpc(t, "anvil_setNonce", lambda address, nonce: [address, to_quantity(nonce)]),
            params=[ADDRESS, ParameterSpec("nonce", "quantity", "Nonce")],
            description="Sets the nonce of an address",
        ),
        "mine": _method(
            "mine", "Mine Blocks", "anvil_mine",
            _rpc(t, "anvil_mine", lambda blocks: [to_quantity(blocks)]),
            params=[ParameterSpec("blocks", "quantity", "Number of blocks")],
            description="Mine a number of blocks",
        ),
        "snapshot": _method(
            "snapshot", "Snapshot State", "evm_snapshot",
            _rpc(t, "evm_snapshot"),
            description="Snapshots the chain state and returns the snapshot id",
        ),
        "revert": _method(
            "revert", "Revert to Snapshot", "evm_revert",
            _rpc(t, "evm_revert", lambda snapshot_id: [to_quantity(snapshot_id)]),
            params=[ParameterSpec("snapshotId", "quantity", "0x1")],
            description="Reverts the chain state to a snapshot",
        ),
        "increaseTime": _method(
            "increaseTime", "Increase Time", "evm_increaseTime",
            _rpc(t, "evm_increaseTime", lambda seconds: [from_hex(to_quantity(seconds))], _decimal),
            params=[ParameterSpec("seconds", "quantity", "Seconds")],
            description="Jumps forward in time by the given number of seconds",
        ),
    }


def _debug(t: ITransport) -> Dict[str, MethodDescriptor]:
    return {
        "traceTransaction": _method(
            "traceTransaction", "Trace Transaction", "debug_traceTransaction",
            _rpc(t, "debug_traceTransaction"),
            params=[TX_HASH],
            description="Traces a transaction execution",
        ),
    }


def build_method_categories(transport: ITransport) -> List[MethodCategory]:
    """Build the catalog with every descriptor bound to `transport`."""
    return [
        MethodCategory("standard", "Standard Methods", _standard(transport)),
        MethodCategory("anvil", "Anvil Methods", _anvil(transport)),
        MethodCategory("debug", "Debug Methods", _debug(transport)),
    ]


__all__ = ["build_method_categories"]
