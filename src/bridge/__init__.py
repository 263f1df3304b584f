"""Orchestration between browser WebRTC participants and phone calls.

Media never passes through this service. It only creates sessions and
participants on the WebRTC platform and tells the Voice API where to
transfer each call leg.
"""
