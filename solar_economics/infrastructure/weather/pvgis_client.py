"""
PVGIS raw yield client.

Fetches multi-year hourly PV output for one panel group from the JRC PVGIS
``seriescalc`` endpoint. The simulation core only consumes the returned
GroupRawYield.
"""

from typing import Optional
import logging
import requests

from solar_economics.domain.installation import (
    FetchParameters,
    GroupRawYield,
    PanelGroup,
    RawYieldSample,
)

logger = logging.getLogger(__name__)

PVGIS_URL = "https://re.jrc.ec.europa.eu/api/v5_3/seriescalc"


class PVGISClient:
    """Client for PVGIS hourly PV production series."""

    def __init__(self, base_url: str = PVGIS_URL, timeout: float = 60):
        self.base_url = base_url
        self.timeout = timeout

    @staticmethod
    def build_params(
        latitude: float,
        longitude: float,
        group: PanelGroup,
        system_loss: float,
        start_year: Optional[int] = None,
        end_year: Optional[int] = None,
    ) -> dict:
        """
        Request parameters for a panel group.

        PVGIS aspect is 0=S, 90=W, -90=E; group azimuth is 0=N, 180=S.
        """
        params = {
            'lat': latitude,
            'lon': longitude,
            'peakpower': group.peak_power_kw,
            'loss': system_loss,
            'angle': group.tilt,
            'aspect': group.azimuth - 180,
            'outputformat': 'json',
            'pvcalculation': 1,
        }
        if start_year is not None:
            params['startyear'] = start_year
        if end_year is not None:
            params['endyear'] = end_year
        return params

    @staticmethod
    def parse_response(data: dict, group_name: str, fetch_params: FetchParameters) -> GroupRawYield:
        """
        Parse a PVGIS JSON response.

        Raises:
            ValueError: If the response has no hourly outputs
        """
        try:
            hourly = data['outputs']['hourly']
        except (KeyError, TypeError):
            raise ValueError("PVGIS response has no outputs.hourly series")

        samples = [RawYieldSample(time=h['time'], power_w=float(h['P'])) for h in hourly]
        return GroupRawYield(group_name=group_name, samples=samples, fetch_params=fetch_params)

    def fetch_group(
        self,
        latitude: float,
        longitude: float,
        group: PanelGroup,
        system_loss: float,
        start_year: Optional[int] = None,
        end_year: Optional[int] = None,
    ) -> GroupRawYield:
        """
        Fetch raw yield for one panel group.

        Returns:
            GroupRawYield with the fetch parameters it was computed with

        Raises:
            requests.HTTPError: If PVGIS returns an error status
        """
        params = self.build_params(latitude, longitude, group, system_loss, start_year, end_year)
        logger.info(
            f"Fetching PVGIS data for '{group.name}': peakpower={group.peak_power_kw:.2f} kWp, "
            f"tilt={group.tilt}, azimuth={group.azimuth}, loss={system_loss}%"
        )

        response = requests.get(self.base_url, params=params, timeout=self.timeout)
        response.raise_for_status()

        fetch_params = FetchParameters(
            peak_power_kw=group.peak_power_kw,
            tilt=group.tilt,
            azimuth=group.azimuth,
            system_loss=system_loss,
            lat=latitude,
            lon=longitude,
        )
        group_yield = self.parse_response(response.json(), group.name, fetch_params)
        logger.info(f"Fetched {len(group_yield)} hourly samples for '{group.name}'")
        return group_yield
