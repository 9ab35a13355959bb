"""
Utility modules for cdnsync.

- config_loader: defaults, JSON overrides and environment credentials
- logger: coloured logging setup
- file_utils: build output walking and hashing
- aws/: S3 client creation
- display/: banners and summaries
"""
