"""
Configuration Package for the Web Transcoder.

This package centralizes the static configuration settings for the application.

This package includes settings for:
- Common application settings like the logging format, the vendor directory for
  bundled executables, and job statuses.
- User-overridable paths loaded from 'config.user.yaml'.
- The fixed MP4 encoding profile used for every transcoding job.
"""
