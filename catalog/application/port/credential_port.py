from abc import ABC, abstractmethod


class CredentialProviderPort(ABC):
    @abstractmethod
    def has_valid_credential(self) -> bool:
        raise NotImplementedError
