"""
Rendering Module
===============

Browser automation for HTML, PDF and screenshot capture.

Components:
- browser: Long-lived browser process shared by all requests
- session: Per-request browsing context and its configuration pipeline
- domain_policy: Allow-list of target hostnames
- raster: Screenshot post-processing (device scale downsampling)
- renderer: Capture orchestration for the html/pdf/screenshot flows
- errors: Error taxonomy shared with the HTTP layer
"""
