"""
Contracts for the host's own printing and scanning services (print spooler, scanner
drivers). devicehub drives office printers and scanners through these, but ships no
implementation of them.

The methods are blocking; devices call them on an executor thread. A backend that does
not support an operation raises NotImplementedError, which reaches the caller unchanged.
"""
from abc import abstractmethod


class PlatformPrinter:

    @abstractmethod
    def available_printers(self):
        """ the names of the printers installed on this host """
        raise NotImplementedError

    @abstractmethod
    def print_text(self, printer_name, text) -> str:
        """ submits text for printing and returns the spooler's job id """
        raise NotImplementedError

    @abstractmethod
    def print_file(self, printer_name, path) -> str:
        raise NotImplementedError

    def is_available(self, printer_name) -> bool:
        return printer_name in self.available_printers()


class PlatformScanner:

    @abstractmethod
    def available_scanners(self):
        raise NotImplementedError

    @abstractmethod
    def scan(self, scanner_name, settings):
        """ scans one page with the given ScannerSettings and returns a ScannedImage """
        raise NotImplementedError

    def is_available(self, scanner_name) -> bool:
        return scanner_name in self.available_scanners()
