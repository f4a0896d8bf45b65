"""bgsub - foreground/background separation demo on OpenCV.

Feeds a video file or a numbered image sequence through OpenCV's
Gaussian-mixture background subtractor and shows each frame next to its
foreground mask.
"""

__version__ = "0.1.0"
