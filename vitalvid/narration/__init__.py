"""
Narration boundary for VitalVid backend.

Design intent:
- Format evaluations into prompt text for an external text generator.
- Assemble narration beats into a media script document.
"""
