from enum import Enum


class ActionId(str, Enum):
    """Host commands that presenters and tree nodes can route to."""

    CONFIGURE = "buildwatch.configure"
    SET_API_TOKEN = "buildwatch.setApiToken"
    REFRESH_TREE = "buildwatch.refreshTreeView"
    OPEN_BUILD_IN_BROWSER = "buildwatch.openBuildInBrowser"
