"""Build CloudEvents and publish them to Eventarc channel connections."""
