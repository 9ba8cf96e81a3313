from abc import ABC, abstractmethod


class Startable(ABC):
    """ Component with an explicit lifecycle, started and stopped by the service entrypoint """

    @abstractmethod
    async def start(self) -> None:
        pass

    @abstractmethod
    async def stop(self) -> None:
        pass
