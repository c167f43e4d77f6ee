"""QRtistry: styled QR code rasterization with shapes, gradients, eyes, logos and backgrounds."""

__version__ = "0.1.0"
