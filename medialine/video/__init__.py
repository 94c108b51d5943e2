"""Video images, conversions, scaling, frame copies and stream transforms."""