#!/usr/bin/python
""" error types raised while decoding firmware images """

class UefiReaderError(ValueError):
    """ base class, all decoder errors are fatal for the whole image """

class SignatureNotFound(UefiReaderError):
    """ no _FVH signature in the raw image """

class ChecksumMismatch(UefiReaderError):
    """ volume or file checksum does not match """

class MalformedContainer(UefiReaderError):
    """ bad declared size, bad signature or read past the buffer """

class UnsupportedFileType(UefiReaderError):
    """ ffs file type not known to the decoder """

class UnsupportedSectionType(UefiReaderError):
    """ section type not known to the decoder """

class UnsupportedCompression(UefiReaderError):
    """ guid-defined section with unknown guid """

class DecompressionFailed(UefiReaderError):
    """ lzma or gzip stream could not be decoded """

class AmbiguousMetadata(UefiReaderError):
    """ more than one user interface name for one module """
