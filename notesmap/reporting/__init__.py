"""
Reporting Module
================
Read-only projections of the graph: minimap, card/connector views and
Mermaid export.
"""
