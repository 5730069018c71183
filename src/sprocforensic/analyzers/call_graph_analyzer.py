"""Call graph analyzer — procedure-to-procedure calls, cycles and hotspots."""

from __future__ import annotations

import itertools
import logging
from typing import TYPE_CHECKING, Any

import networkx as nx

if TYPE_CHECKING:
    from sprocforensic.analyzers.sp_analyzer import ClassifiedProcedure

logger = logging.getLogger(__name__)

MAX_CYCLES = 100


class CallGraphAnalyzer:
    """Build and analyze the graph of procedures calling other procedures.

    Creates a directed graph where:
    - Nodes are procedures from the dump (keyed by lowercased bare name)
    - Edges point from caller to callee

    Calls to procedures that are not in the dump are counted as unresolved.
    """

    def __init__(self, procedures: list[ClassifiedProcedure], hotspot_limit: int = 10) -> None:
        self.procedures = procedures
        self.hotspot_limit = hotspot_limit
        self._graph: nx.DiGraph = nx.DiGraph()
        self._unresolved: set[str] = set()

    def analyze(self) -> dict[str, Any]:
        """Build the call graph, fill ``called_by_sprocs`` and summarize.

        Returns:
            Dict with 'edgeCount', 'cycles', 'hotspots' and 'unresolvedCalls' keys.
        """
        logger.info("Starting call graph analysis")
        self._build_graph()

        for proc in self.procedures:
            proc.called_by_sprocs = self.callers_of(proc.name)

        cycles = self._detect_cycles()
        summary = {
            "edgeCount": self._graph.number_of_edges(),
            "cycles": cycles,
            "hotspots": self._find_hotspots(),
            "unresolvedCalls": sorted(self._unresolved, key=str.lower),
        }

        logger.info(
            "Call graph analysis complete: %d nodes, %d edges, %d cycles",
            self._graph.number_of_nodes(),
            self._graph.number_of_edges(),
            len(cycles),
        )
        return summary

    def _build_graph(self) -> None:
        for proc in self.procedures:
            self._graph.add_node(proc.name.lower(), name=proc.name, schema=proc.schema)

        for proc in self.procedures:
            caller = proc.name.lower()
            for callee in proc.sprocs_called:
                key = callee.lower()
                if key in self._graph:
                    self._graph.add_edge(caller, key)
                else:
                    self._unresolved.add(callee)

    def _display(self, key: str) -> str:
        return self._graph.nodes[key].get("name", key)

    def callers_of(self, name: str) -> list[str]:
        """Direct callers of a procedure, sorted."""
        key = name.lower()
        if key not in self._graph:
            return []
        return sorted((self._display(p) for p in self._graph.predecessors(key)), key=str.lower)

    def _detect_cycles(self) -> list[list[str]]:
        """Find recursive call cycles (at most MAX_CYCLES), in a stable order."""
        try:
            raw = list(itertools.islice(nx.simple_cycles(self._graph), MAX_CYCLES))
        except nx.NetworkXError:
            return []

        cycles: list[list[str]] = []
        for cycle in raw:
            if len(cycle) < 2:
                continue
            # Rotate so the smallest key leads; the same cycle then always prints the same
            pivot = cycle.index(min(cycle))
            rotated = cycle[pivot:] + cycle[:pivot]
            cycles.append([self._display(k) for k in rotated])
        return sorted(cycles, key=lambda c: [n.lower() for n in c])

    def _find_hotspots(self) -> list[dict[str, Any]]:
        """Procedures called by the most other procedures."""
        hotspots = [
            {
                "name": self._display(node),
                "schema": self._graph.nodes[node].get("schema", ""),
                "callerCount": self._graph.in_degree(node),
                "transitiveCallerCount": len(nx.ancestors(self._graph, node)),
            }
            for node in self._graph.nodes
            if self._graph.in_degree(node) > 0
        ]
        hotspots.sort(key=lambda h: (-h["callerCount"], h["name"].lower()))
        return hotspots[: self.hotspot_limit]
