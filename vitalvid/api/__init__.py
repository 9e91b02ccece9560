"""
API orchestration boundary for VitalVid backend.

Design intent:
- Expose thin, typed endpoints over the risk and narration modules.
- Degrade to text-only output when optional collaborators fail.
"""
