"""
VitalVid backend package.

Design intent:
- Turn a five-metric blood panel into risk tiers, targets and guidance.
- Keep the risk core pure and free of service dependencies.
"""
