"""
VoIPmonitor support assistant.

Tool-calling front end for the VoIPmonitor GUI API: call search, call
details with SIP history, PCAP links and problem-call triage.
"""

__version__ = "1.0.0"
