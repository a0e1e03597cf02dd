class EngineError(RuntimeError):
    pass


class ValidationError(EngineError):
    pass


class DecodeError(EngineError):
    pass


class TransportError(EngineError):
    pass


class ProviderError(EngineError):
    pass
