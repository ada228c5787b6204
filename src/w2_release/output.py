"""
Output module for release calculations
Writes grid elevations and withdrawal results to netCDF files
"""
import os
from datetime import datetime
import numpy as np
import netCDF4 as nc


class ReleaseWriter:
    """Write grid elevations and layer outflow time series (CF-style netCDF)"""

    def __init__(self, output_dir, case_name='w2release', start_time=None):
        """
        Initialize writer

        Parameters:
        -----------
        output_dir : str
            Directory for output files (created if needed)
        case_name : str
            Prefix of the output file names
        start_time : datetime, optional
            Reference time for the time axis (default: first record)
        """
        self.output_dir = output_dir
        self.case_name = case_name
        self.start_time = start_time
        self.nc_file = None
        self.time_index = 0

    def write_elevations(self, grid):
        """
        Write the layer-top elevations of one waterbody

        Parameters:
        -----------
        grid : ElevationGrid

        Returns:
        --------
        filename : str
        """
        os.makedirs(self.output_dir, exist_ok=True)
        filename = os.path.join(self.output_dir, f"{self.case_name}_el_wb{grid.jw}.nc")
        segments = np.arange(grid.segments.start, grid.segments.stop)
        layers = np.arange(1, grid.kmx + 1)

        with nc.Dataset(filename, 'w', format='NETCDF4') as f:
            f.createDimension('layer', len(layers))
            f.createDimension('segment', len(segments))

            layer_var = f.createVariable('layer', 'i4', ('layer',))
            layer_var[:] = layers
            layer_var.long_name = 'layer number (1 = top)'

            seg_var = f.createVariable('segment', 'i4', ('segment',))
            seg_var[:] = segments
            seg_var.long_name = 'segment number'

            el_var = f.createVariable('el', 'f8', ('layer', 'segment'), fill_value=np.nan)
            el_var[:, :] = grid.el[1:grid.kmx + 1, grid.segments.start:grid.segments.stop]
            el_var.long_name = 'Layer top elevation'
            el_var.units = 'm'

            f.waterbody = grid.jw
            f.history = f"Created {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}"

        print(f"Grid elevations written: {filename}")
        return filename

    def open_release_file(self, kmx, outlet_name='release'):
        """Create the release file with an unlimited time dimension"""
        os.makedirs(self.output_dir, exist_ok=True)
        filename = os.path.join(self.output_dir, f"{self.case_name}_{outlet_name}.nc")
        self.nc_file = nc.Dataset(filename, 'w', format='NETCDF4')
        self.nc_file.createDimension('time', None)
        self.nc_file.createDimension('layer', kmx + 1)

        layer_var = self.nc_file.createVariable('layer', 'i4', ('layer',))
        layer_var[:] = np.arange(kmx + 1)
        layer_var.long_name = 'layer number (1 = top)'

        time_var = self.nc_file.createVariable('time', 'f8', ('time',))
        time_var.standard_name = 'time'
        time_var.long_name = 'time'
        time_var.calendar = 'standard'
        time_var.axis = 'T'

        qout = self.nc_file.createVariable('qout', 'f8', ('time', 'layer'))
        qout.long_name = 'Outflow by layer'
        qout.units = 'm3 s-1'

        tout = self.nc_file.createVariable('tout', 'f8', ('time',), fill_value=-99.0)
        tout.long_name = 'Mixed release temperature'
        tout.units = 'degC'

        self.nc_file.outlet = outlet_name
        self.time_index = 0
        print(f"Creating release output file: {filename}")
        return filename

    def write_release(self, time, tavg, qout):
        """Append one release record"""
        if self.nc_file is None:
            raise RuntimeError("Release file is not open; call open_release_file first")
        if self.start_time is None:
            self.start_time = time
        time_var = self.nc_file.variables['time']
        if self.time_index == 0:
            time_var.units = f'hours since {self.start_time.strftime("%Y-%m-%d %H:%M:%S")}'

        time_var[self.time_index] = (time - self.start_time).total_seconds() / 3600.0
        self.nc_file.variables['tout'][self.time_index] = tavg
        self.nc_file.variables['qout'][self.time_index, :] = qout
        self.time_index += 1

    def close(self):
        """Close the release file"""
        if self.nc_file is not None:
            self.nc_file.close()
            self.nc_file = None
