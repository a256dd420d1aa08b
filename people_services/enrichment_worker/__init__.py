"""
Person Enrichment Worker

Background worker that enriches person records:
- Consumes processPerson work messages from a Redis stream (consumer group)
- Looks up each person by email in the external people search service
- Merges the top candidate into the stored record
- Exposes health and processed-count endpoints over HTTP
"""

__version__ = "1.0.0"
