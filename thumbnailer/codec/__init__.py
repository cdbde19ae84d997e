from thumbnailer.codec.errors import CodecError
from thumbnailer.codec.session import CodecSession, CodecState, get_codec_session

__all__ = ["CodecError", "CodecSession", "CodecState", "get_codec_session"]
