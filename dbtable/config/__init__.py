##############################################################################
# Copyright (c) dbtable Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details.
##############################################################################

"""
Used to store the application configuration.

Modules:
    config_filepaths.py: Constants for where configuration files are looked up.
    configfile.py: Locating, loading and defaulting the `dbtable.yaml` file.
"""
from types import SimpleNamespace
from typing import Dict, List, Optional

from dbtable.utils import nested_dict_to_namespaces


SECTIONS: List[str] = ["database", "logging"]


class Config:  # pylint: disable=R0903
    """
    The Config class, meant to store all dbtable settings in one place.

    Attributes:
        database (Optional[SimpleNamespace]): Settings for the default database
            handle (e.g. `path`).
        logging (Optional[SimpleNamespace]): Settings for logging (`level`, `colors`).

    Methods:
        __str__: Returns a formatted string representation of the Config instance.
        load_app_into_namespaces: Converts the provided configuration dictionary into namespaces
            and assigns them to the Config instance's attributes.
    """

    def __init__(self, app_dict: Dict):
        """
        Initializes the Config instance with configuration data from a dictionary.

        Args:
            app_dict: A dictionary containing configuration data. Each known
                section becomes a `SimpleNamespace` attribute; missing sections are None.
        """
        self.database: Optional[SimpleNamespace] = None
        self.logging: Optional[SimpleNamespace] = None
        self.load_app_into_namespaces(app_dict)

    def __str__(self) -> str:
        """
        Returns a formatted string representation of the Config instance.

        Returns:
            str: A string containing the values of every section.
        """
        formatted_str = "config:"
        for name in SECTIONS:
            attr = getattr(self, name)
            if attr is not None:
                items = (f"    {k}: {v!r}" for k, v in attr.__dict__.items())
                joined_items = "\n".join(items)
                formatted_str += f"\n  {name}:\n{joined_items}"
            else:
                formatted_str += f"\n  {name}:\n    None"
        return formatted_str

    def load_app_into_namespaces(self, app_dict: Dict):
        """
        Converts the provided application dictionary into namespaces and assigns them
        to the Config instance's attributes.

        Args:
            app_dict: A dictionary containing configuration data for the application.
        """
        for field in SECTIONS:
            try:
                setattr(self, field, nested_dict_to_namespaces(app_dict[field]))
            except KeyError:
                # The sections are optional
                pass
