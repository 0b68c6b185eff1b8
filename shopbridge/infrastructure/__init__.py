"""Infrastructure: outbound HTTP, platform API, request verification, storage backends."""
