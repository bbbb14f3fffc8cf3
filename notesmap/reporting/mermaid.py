"""
Mermaid Export
==============

Renders the current graph as a Mermaid flowchart so a notes map can be
pasted into GitHub, VS Code or any Markdown viewer.
"""

import re
from pathlib import Path

from notesmap.graph.models import GraphState, Node
from notesmap.graph.store import live_edges
from notesmap.reporting.views import TONE_COLORS


class MermaidGenerator:
    """Generate a Mermaid flowchart for a graph state."""

    SHAPE_MAP = {
        'root': ('([', '])'),   # stadium
        'good': ('[', ']'),
        'mid':  ('[', ']'),
        'bad':  ('[', ']'),
        'none': ('(', ')'),     # rounded
    }

    def __init__(self, state: GraphState):
        self.state = state

    @staticmethod
    def _safe_id(id_str: str) -> str:
        """Mermaid identifiers: letters, digits and underscores only."""
        return re.sub(r'[^A-Za-z0-9_]', '', id_str) or 'node'

    @staticmethod
    def _node_text(node: Node) -> str:
        return node.title.replace('"', "'") or ' '

    def render(self) -> str:
        lines = ['```mermaid', 'flowchart TB', '']

        for tone, color in TONE_COLORS.items():
            if tone != 'none':
                lines.append(f'    classDef {tone} fill:{color},stroke:{color},color:#fff')
        lines.append('')

        root = self.state.root
        for node in self.state.nodes:
            sid = self._safe_id(node.id)
            shape_key = 'root' if root is not None and node.id == root.id else node.tone
            open_s, close_s = self.SHAPE_MAP.get(shape_key, ('[', ']'))
            lines.append(f'    {sid}{open_s}"{self._node_text(node)}"{close_s}')
            if node.tone != 'none':
                lines.append(f'    class {sid} {node.tone}')
        lines.append('')

        for edge in live_edges(self.state):
            lines.append(f'    {self._safe_id(edge.source)} --- {self._safe_id(edge.target)}')

        lines.append('```')
        lines.append('')
        return '\n'.join(lines)

    def generate(self, output_path: Path) -> Path:
        """Write a Markdown file containing the flowchart."""
        title = self.state.root.title if self.state.root else 'Notes'
        content = f'# {title}\n\n' + self.render()
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding='utf-8')
        return output_path
