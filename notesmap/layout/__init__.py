"""
Layout Module
=============

- radial.py:   two-ring auto-arrange around the root
- template.py: the six-block analysis template
"""

from notesmap.layout.radial import RadialLayout, auto_arrange
from notesmap.layout.template import TEMPLATE_BLOCKS, build_template_around

__all__ = ['RadialLayout', 'auto_arrange', 'TEMPLATE_BLOCKS', 'build_template_around']
