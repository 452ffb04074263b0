"""
Fruit Invoice - Core Package

Invoice composition and local persistence for a small fruit stall:
build an itemized invoice, keep it on the device, browse the history
and total the takings per day.

DESIGN PRINCIPLES:
1. The draft is owned by whoever creates it, never a global
2. A saved invoice is a snapshot; later preset edits never touch it
3. Storage failures are reported, never hidden
4. Every persisted change is audited
"""

__version__ = "1.0.0"
__author__ = "Fruit Invoice Team"
