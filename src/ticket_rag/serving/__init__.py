"""
Serving — FastAPI application for ticket ingestion and answering.

The app is a thin transport: it checks the shared secrets, maps errors to
HTTP status codes and delegates to the pipelines built by
:func:`ticket_rag.services.build_services`.
"""
