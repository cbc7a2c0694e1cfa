"""Choice of viewing mode for converted studies based on their modality."""

from urllib.parse import unquote, urlencode

from studygate.models import RouteDecision
from studygate.services.metadata_store import MetadataStore
from studygate.utils.logger import component_logger

logger = component_logger("ingestion")


class ModalityRouter:
    """Redirects studies of a specialized modality (e.g. slide microscopy) to their own mode."""

    def __init__(
        self,
        store: MetadataStore,
        specialized_modality: str = "SM",
        specialized_mode: str = "microscopy",
        local_data_source: str = "dicomlocal",
    ):
        self._store = store
        self._specialized_modality = specialized_modality
        self._specialized_mode = specialized_mode
        self._local_data_source = local_data_source

    def is_specialized(self, study_id: str) -> bool:
        """Check whether any series (or its first instance) has the specialized modality."""
        study = self._store.get_study(study_id)
        if study is None:
            logger.warning(f"Study {study_id} is not in the metadata store")
            return False
        return study.has_modality(self._specialized_modality)

    def build_redirect_url(self, mode_path: str, study_ids: list[str]) -> str:
        """Build ``/<mode>?StudyInstanceUIDs=...&datasources=<local>``, URL-decoded."""
        query = [("StudyInstanceUIDs", study_id) for study_id in study_ids]
        query.append(("datasources", self._local_data_source))
        return f"/{mode_path.strip('/')}?{unquote(urlencode(query))}"

    def route(
        self, study_ids: list[str], extension_available: bool, mode_path: str
    ) -> RouteDecision:
        """Pick the mode path and the studies carried into it.

        Without the specialized extension everything passes through unchanged.
        Otherwise, if any study is specialized, the mode switches and only the
        specialized subset is carried forward. The redirect query always lists
        every converted study once, specialized ones first.

        Args:
            study_ids: StudyInstanceUIDs returned by the converter
            extension_available: Whether the specialized viewing extension is loaded
            mode_path: Mode path requested by the caller

        Returns:
            The routing decision including the redirect URL
        """
        specialized: list[str] = []
        if extension_available:
            specialized = [s for s in study_ids if self.is_specialized(s)]

        if not specialized:
            return RouteDecision(
                study_ids=list(study_ids),
                mode_path=mode_path,
                redirect_url=self.build_redirect_url(mode_path, list(study_ids)),
            )

        logger.info(
            f"{len(specialized)} of {len(study_ids)} studies contain "
            f"{self._specialized_modality}, switching to '{self._specialized_mode}' mode"
        )
        ordered = specialized + [s for s in study_ids if s not in specialized]
        return RouteDecision(
            study_ids=specialized,
            mode_path=self._specialized_mode,
            redirect_url=self.build_redirect_url(self._specialized_mode, ordered),
            specialized=True,
        )
