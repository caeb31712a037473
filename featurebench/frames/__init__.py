from .frame_store import Frame, FrameStore

__all__ = ['Frame', 'FrameStore']
