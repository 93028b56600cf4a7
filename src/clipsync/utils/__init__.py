from clipsync.utils.data_uri import describe, encode_image

__all__ = ['describe', 'encode_image']
