"""Team knowledge base REST API."""
