"""
Chat load-testing package (Locust-based).

Drives concurrent simulated users against a Dify chat app's
``/chat-messages`` endpoint.  Each user keeps the conversation id the
server assigns on its first successful answer, so later questions
continue the same dialogue.

Key Concepts Demonstrated:
- Per-user conversation state owned by the Locust user instance
- Forgiving server-sent-event parsing with an explicit result type
- Custom chat metrics and threshold gates alongside Locust's stats
- JSON run summary for CI archiving
"""
