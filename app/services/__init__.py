"""
Services package for EPG Viewer

This package contains the decoding logic and the upload service layer.
"""
from app.services.epg_decoder_service import decode_guide
from app.services.upload_service import UploadSummary, decode_upload

__all__ = [
    'decode_guide',
    'decode_upload',
    'UploadSummary',
]
