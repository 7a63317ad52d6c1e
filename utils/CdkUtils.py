import json
import os

_PROJECT_SETTINGS = None

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class CdkUtils():

    @staticmethod
    def get_project_settings() -> dict:
        """The project settings are the "projectSettings" section of the
        cdk.json in the project root, so the settings are found regardless
        of the directory the app or the client utilities are started from.
        """

        # The settings are only read once.  From then on we use
        # the global variable _PROJECT_SETTINGS to contain the value.
        global _PROJECT_SETTINGS

        if _PROJECT_SETTINGS is None:
            with open(os.path.join(PROJECT_ROOT, "cdk.json"), 'r') as cdk_json:
                _PROJECT_SETTINGS = json.loads(cdk_json.read()).get("projectSettings")

        return _PROJECT_SETTINGS

    @staticmethod
    def get_manifest_path() -> str:
        """Location of the image manifest, relative paths being relative to
        the project root.
        """
        manifest_file = CdkUtils.get_project_settings()["images"]["manifestFile"]
        return os.path.join(PROJECT_ROOT, manifest_file)
