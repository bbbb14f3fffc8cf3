"""
Notes Map - Main Runner Script
==============================

Drive the notes canvas from the project root. Each command restores the
stored graph (or starts a fresh one), applies the command, saves and exits.

Usage:
    python run.py show                      # Summary of the current graph
    python run.py add [--parent ID] [--title TEXT]
    python run.py template                  # Six analysis blocks around the root
    python run.py arrange                   # Two-ring auto layout
    python run.py center [ID]               # Center viewport on a node (root by default)
    python run.py export [FILE]             # JSON to stdout or FILE
    python run.py import FILE               # Replace the graph from JSON
    python run.py reset                     # Fresh graph
    python run.py mermaid [FILE]            # Mermaid flowchart to stdout or FILE
    python run.py sweep                     # Run the expiry check once
    python run.py watch                     # Keep the sweep running until Ctrl+C

Options:
    --seed SYMBOL   Title the root "Notes: SYMBOL" while it has a default title
"""

import argparse
import os
import sys
from pathlib import Path

# Add project root to Python path
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Notes Map - mind-map notes canvas',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument('--seed', help='Ticker used to title the root')
    sub = parser.add_subparsers(dest='command')

    sub.add_parser('show', help='Summary of the current graph')

    add = sub.add_parser('add', help='Add a node')
    add.add_argument('--parent', help='Parent node id (edge parent -> new node)')
    add.add_argument('--title', help='Node title')

    sub.add_parser('template', help='Apply the analysis template')
    sub.add_parser('arrange', help='Auto-arrange around the root')

    center = sub.add_parser('center', help='Center the viewport on a node')
    center.add_argument('node_id', nargs='?')

    export = sub.add_parser('export', help='Export the graph as JSON')
    export.add_argument('file', nargs='?')

    imp = sub.add_parser('import', help='Import a graph from JSON')
    imp.add_argument('file')

    sub.add_parser('reset', help='Start a fresh graph')

    mermaid = sub.add_parser('mermaid', help='Export a Mermaid flowchart')
    mermaid.add_argument('file', nargs='?')

    sub.add_parser('sweep', help='Run the expiry check once')
    sub.add_parser('watch', help='Run the expiry sweep until interrupted')
    return parser


def print_summary(editor) -> None:
    state = editor.state
    print(f"Root:      {state.root.title} ({state.root.id})")
    print(f"Nodes:     {len(state.nodes)}")
    print(f"Edges:     {len(state.edges)}")
    print(f"Selected:  {state.selected_id or '-'}")
    print(f"Zoom:      {editor.zoom_percent()}%")
    print(f"Expires:   in {editor.time_left_label()}")
    for node in state.nodes:
        marker = '*' if node.id == state.selected_id else ' '
        print(f"  {marker} {node.id:<20} [{node.tone:<4}] {node.title}")


def main(argv=None):
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        print(__doc__)
        sys.exit(1)

    from notesmap.editor import build_editor

    editor = build_editor()
    editor.mount(seed=args.seed)
    command = args.command

    try:
        if command == 'show':
            print_summary(editor)

        elif command == 'add':
            node = editor.add_node(args.parent, args.title)
            print(f"Added {node.id}: {node.title}")

        elif command == 'template':
            editor.apply_template()
            print(f"Template applied, {len(editor.state.nodes)} nodes")

        elif command == 'arrange':
            editor.auto_arrange()
            print("Arranged")

        elif command == 'center':
            editor.center_on(args.node_id)
            vp = editor.state.viewport
            print(f"Viewport: x={vp.x:.1f} y={vp.y:.1f} zoom={vp.zoom:.2f}")

        elif command == 'export':
            text = editor.export_text()
            if args.file:
                Path(args.file).write_text(text, encoding='utf-8')
                print(f"Exported to {args.file}")
            else:
                print(text)

        elif command == 'import':
            text = Path(args.file).read_text(encoding='utf-8')
            result = editor.import_text(text)
            if not result.ok:
                print(f"Invalid JSON: {result.error}")
                sys.exit(1)
            print(f"Imported {len(result.state.nodes)} nodes, {len(result.state.edges)} edges")

        elif command == 'reset':
            editor.reset_all()
            print("Reset to a fresh graph")

        elif command == 'mermaid':
            from notesmap.reporting.mermaid import MermaidGenerator
            if args.file:
                path = MermaidGenerator(editor.state).generate(Path(args.file))
                print(f"Written {path}")
            else:
                print(editor.mermaid())

        elif command == 'sweep':
            expired = editor.persistence.sweep()
            print("Expired, started fresh" if expired else f"Still valid, expires in {editor.time_left_label()}")

        elif command == 'watch':
            print("Sweeping for expiry (Ctrl+C to stop)...")
            editor.persistence.timers.run_forever()

    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
    finally:
        editor.unmount()


if __name__ == "__main__":
    main()
