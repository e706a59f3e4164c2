from artiflare.wire.codecs.rrc import FromDomain, Reply, RequestResponseCodec, ToDomain

__all__ = ("RequestResponseCodec", "Reply", "ToDomain", "FromDomain")
