"""External services: file storage backends."""
