"""
simulation/netlist.py

Groups wire endpoints that are electrically connected into nets.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from models.node import NetData
from models.wire import WireData

logger = logging.getLogger(__name__)


@dataclass
class Netlist:
    """Result of net construction for one circuit load."""

    nets: dict[str, NetData] = field(default_factory=dict)
    wire_to_net: dict[str, str] = field(default_factory=dict)
    terminal_to_net: dict[tuple[str, str], NetData] = field(default_factory=dict)

    def net_for_terminal(self, component_id: str, port_id: str) -> Optional[NetData]:
        return self.terminal_to_net.get((component_id, port_id))

    def net_for_wire(self, wire_id: str) -> Optional[NetData]:
        net_id = self.wire_to_net.get(wire_id)
        if net_id is None:
            return None
        return self.nets.get(net_id)

    def members(self, net_id: str) -> set[tuple[str, str]]:
        net = self.nets.get(net_id)
        return set(net.terminals) if net else set()

    def __len__(self) -> int:
        return len(self.nets)


class NetlistBuilder:
    """
    Builds nets from an ordered wire list.

    Terminals are merged incrementally through a terminal -> net map, so a
    wire that bridges two existing nets joins them into one. Net ids are
    handed out in first-seen wire order, which keeps the result stable for
    the same wire list.
    """

    def __init__(self):
        self._netlist = Netlist()
        self._counter = 0

    def build(self, wires: Iterable[WireData]) -> Netlist:
        self._netlist = Netlist()
        self._counter = 0

        for wire in wires:
            self._add_wire(wire)

        # Every wire maps to the net that finally holds its terminals
        for net in self._netlist.nets.values():
            for wire_id in net.wire_ids:
                self._netlist.wire_to_net[wire_id] = net.net_id

        logger.debug(
            "Built %d nets from %d wires", len(self._netlist.nets), len(self._netlist.wire_to_net)
        )
        return self._netlist

    def _new_net(self) -> NetData:
        net = NetData(net_id=f"net_{self._counter}")
        self._counter += 1
        self._netlist.nets[net.net_id] = net
        return net

    def _add_wire(self, wire: WireData) -> None:
        """Update net connectivity when a wire is added."""
        terminal_to_net = self._netlist.terminal_to_net

        source = (wire.source_component_id, wire.source_port)
        target = (wire.target_component_id, wire.target_port)

        source_net = terminal_to_net.get(source)
        target_net = terminal_to_net.get(target)

        if source_net is None and target_net is None:
            net = self._new_net()
            net.add_terminal(*source)
            net.add_terminal(*target)
            net.add_wire(wire.wire_id)
            terminal_to_net[source] = net
            terminal_to_net[target] = net

        elif source_net is None:
            target_net.add_terminal(*source)
            target_net.add_wire(wire.wire_id)
            terminal_to_net[source] = target_net

        elif target_net is None:
            source_net.add_terminal(*target)
            source_net.add_wire(wire.wire_id)
            terminal_to_net[target] = source_net

        else:
            source_net.add_wire(wire.wire_id)
            if source_net is not target_net:
                # Keep the older net so ids follow first-seen order
                keep, drop = sorted((source_net, target_net), key=lambda n: int(n.net_id.split("_")[1]))
                keep.merge_with(drop)
                for terminal in drop.terminals:
                    terminal_to_net[terminal] = keep
                del self._netlist.nets[drop.net_id]


def build_netlist(wires: Iterable[WireData]) -> Netlist:
    """Convenience wrapper around NetlistBuilder.build()."""
    return NetlistBuilder().build(wires)
