"""Settings package.

``base`` holds the shared configuration; ``dev``, ``prod`` and ``test``
extend it with environment specific overrides.
"""
