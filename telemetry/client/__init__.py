from .emitter import DEFAULT_ENDPOINT, EmitResult, MetricEmitter, build_payload

__all__ = [
    'DEFAULT_ENDPOINT',
    'EmitResult',
    'MetricEmitter',
    'build_payload',
]
