from dataclasses import dataclass
from typing import Optional


@dataclass
class StreamConfig:
    """
    Execution settings shared by every invoker's `run`.
    Host reference invokers accept it and ignore it; stream_id and log_level are only
    kept so device invokers and host references share one call signature.
    """
    stream_id: Optional[int] = None
    time_kernel: bool = False
    log_level: int = 0


class BaseArgument:
    """
    The base class for all operator arguments.
    An argument is an immutable description of one invocation.
    """


class BaseInvoker:
    """
    The base class for all invokers.
    An invoker executes an operator against one argument and returns a float metric.
    """

    def run(self, arg: BaseArgument, stream_config: Optional[StreamConfig] = None) -> float:
        """
        Execute against `arg`.
        Must be overridden by child classes.
        """
        raise NotImplementedError

    def __call__(self, *args: object, **kwargs: object) -> float:
        return self.run(*args, **kwargs)


class BaseOperator:
    """
    The base class for all operators.
    Provides the support check, invoker construction and identification that callers
    use to pick one implementation among several.
    """

    def is_supported_argument(self, arg: BaseArgument) -> bool:
        """
        Whether this operator can execute `arg`.
        Must be overridden by child classes.
        """
        raise NotImplementedError

    def make_invoker_pointer(self) -> BaseInvoker:
        """
        Return a new invoker for this operator.
        Must be overridden by child classes.
        """
        raise NotImplementedError

    def get_type_string(self) -> str:
        """
        Human readable name of the operator.
        """
        return type(self).__name__

    def __str__(self):
        return self.get_type_string().strip()
