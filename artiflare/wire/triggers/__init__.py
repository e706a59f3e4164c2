from artiflare.wire.triggers.http import HTTPRouteTrigger, Method

__all__ = ("HTTPRouteTrigger", "Method")
