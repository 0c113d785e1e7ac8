"""
statusflow kernel

Custom multi-step approval workflows for tracked entities:
- Ordered status graphs with guarded, optionally approval-gated transitions
- Task gating of transitions by required work
- Role and user based approver permissions
- Append-only status history per project
"""

__version__ = "0.1.0"
